import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from quizapp.domain.errors import GradingError, InvalidPassingScore, MalformedQuestion, UnknownQuestionType


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_IN_BLANK = "fill_in_blank"
    MATCH_FOLLOWING = "match_following"
    SHORT_ANSWER = "short_answer"
    LONG_ANSWER = "long_answer"


# question_type -> the one per-type field it owns (None: owns nothing)
TYPE_FIELD: Dict[QuestionType, Optional[str]] = {
    QuestionType.MULTIPLE_CHOICE: "options",
    QuestionType.TRUE_FALSE: None,
    QuestionType.FILL_IN_BLANK: "blanks",
    QuestionType.MATCH_FOLLOWING: "match_pairs",
    QuestionType.SHORT_ANSWER: None,
    QuestionType.LONG_ANSWER: None,
}
PER_TYPE_FIELDS = ("options", "blanks", "match_pairs")
TRUE_FALSE_VALUES = ("true", "false")


def parse_question_type(value: Any, question_id: Optional[str] = None) -> QuestionType:
    if isinstance(value, QuestionType):
        return value
    key = str(value or "").strip().lower()
    try:
        return QuestionType(key)
    except ValueError:
        raise UnknownQuestionType(f"unknown question_type {value!r}", question_id) from None


@dataclass(frozen=True)
class MatchPair:
    left: str
    right: str

    def to_dict(self) -> Dict[str, str]:
        return {"left": self.left, "right": self.right}


@dataclass
class Question:
    id: str
    question_type: QuestionType
    correct_answer: Optional[str]
    points: float = 1
    quiz_id: Optional[str] = None
    question_text: str = ""
    difficulty: Optional[str] = None
    options: Optional[List[str]] = None        # multiple_choice only
    blanks: Optional[List[str]] = None         # fill_in_blank only
    match_pairs: Optional[List[MatchPair]] = None  # match_following only
    explanation: Optional[str] = None
    order_index: int = 0

    def __post_init__(self):
        self.question_type = parse_question_type(self.question_type, self.id)
        if not isinstance(self.id, str) or not self.id:
            raise MalformedQuestion("question id must be a non-empty string", None)
        if (isinstance(self.points, bool) or not isinstance(self.points, (int, float))
                or not math.isfinite(self.points) or self.points <= 0):
            raise MalformedQuestion(f"points must be a positive number, got {self.points!r}", self.id)

        owned = TYPE_FIELD[self.question_type]
        for name in PER_TYPE_FIELDS:
            if name != owned and getattr(self, name) is not None:
                raise MalformedQuestion(
                    f"{self.question_type.value} question must not carry {name}", self.id
                )
        if owned is not None and getattr(self, owned) is None:
            raise MalformedQuestion(f"{self.question_type.value} question requires {owned}", self.id)

        check = _CHECKS.get(self.question_type)
        if check:
            check(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "question_text": self.question_text,
            "question_type": self.question_type.value,
            "difficulty": self.difficulty,
            "correct_answer": self.correct_answer,
            "options": list(self.options) if self.options is not None else None,
            "blanks": list(self.blanks) if self.blanks is not None else None,
            "match_pairs": [p.to_dict() for p in self.match_pairs] if self.match_pairs is not None else None,
            "points": self.points,
            "explanation": self.explanation,
            "order_index": self.order_index,
        }


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _check_multiple_choice(q: Question):
    if not _is_str_list(q.options) or len(q.options) < 2:
        raise MalformedQuestion("options must be a list of at least two strings", q.id)
    if q.correct_answer not in q.options:
        raise MalformedQuestion("correct_answer is not one of the options", q.id)


def _check_true_false(q: Question):
    if q.correct_answer not in TRUE_FALSE_VALUES:
        raise MalformedQuestion("true_false correct_answer must be 'true' or 'false'", q.id)


def _check_fill_in_blank(q: Question):
    if not _is_str_list(q.blanks) or not q.blanks:
        raise MalformedQuestion("blanks must be a non-empty list of strings", q.id)


def _check_match_following(q: Question):
    if not isinstance(q.match_pairs, list) or not all(isinstance(p, MatchPair) for p in q.match_pairs):
        raise MalformedQuestion("match_pairs must be a list of MatchPair", q.id)
    lefts = [p.left for p in q.match_pairs]
    if len(set(lefts)) != len(lefts):
        raise MalformedQuestion("match_pairs contain a repeated left value", q.id)


_CHECKS = {
    QuestionType.MULTIPLE_CHOICE: _check_multiple_choice,
    QuestionType.TRUE_FALSE: _check_true_false,
    QuestionType.FILL_IN_BLANK: _check_fill_in_blank,
    QuestionType.MATCH_FOLLOWING: _check_match_following,
}


# ---- loose input (store rows, LLM output, JSONL) ----

def _maybe_json(value: Any) -> Any:
    if isinstance(value, str):
        s = value.strip()
        if s.startswith("[") or s.startswith("{"):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return value
    return value


def _to_pair(item: Any, qid: str) -> MatchPair:
    if isinstance(item, MatchPair):
        return item
    if isinstance(item, dict) and isinstance(item.get("left"), str) and isinstance(item.get("right"), str):
        return MatchPair(left=item["left"], right=item["right"])
    if isinstance(item, (list, tuple)) and len(item) == 2 and all(isinstance(v, str) for v in item):
        return MatchPair(left=item[0], right=item[1])
    raise MalformedQuestion(f"cannot read match pair {item!r}", qid)


def _canonical_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str) and value.strip().lower() in TRUE_FALSE_VALUES:
        return value.strip().lower()
    return value


def _points(value: Any, qid: str) -> Any:
    if value is None:
        return 1
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            raise MalformedQuestion(f"points must be numeric, got {value!r}", qid) from None
    return value


def _order_index(value: Any, qid: str) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        raise MalformedQuestion(f"order_index must be an integer, got {value!r}", qid) from None


def check_unique_ids(questions: List[Question]) -> None:
    seen = set()
    for q in questions:
        if q.id in seen:
            raise MalformedQuestion(f"question id {q.id!r} is used more than once", q.id)
        seen.add(q.id)


def question_from_dict(data: Dict[str, Any], default_id: Optional[str] = None) -> Question:
    """Build a validated Question from its persisted / generated dict shape.

    Empty per-type fields that do not belong to the question's type are
    dropped (generators like to emit ``"options": []`` everywhere); populated
    ones are left in place so construction rejects them.
    """
    if not isinstance(data, dict):
        raise MalformedQuestion(f"question must be an object, got {type(data).__name__}", default_id)
    qid = str(data.get("id") or default_id or "")
    qtype = parse_question_type(data.get("question_type") or data.get("type"), qid or None)
    owned = TYPE_FIELD[qtype]

    fields: Dict[str, Any] = {}
    for name in PER_TYPE_FIELDS:
        value = _maybe_json(data.get(name))
        if name != owned and not value:
            value = None
        fields[name] = value

    if fields["match_pairs"] is not None:
        if not isinstance(fields["match_pairs"], list):
            raise MalformedQuestion("match_pairs must be a list", qid)
        fields["match_pairs"] = [_to_pair(p, qid) for p in fields["match_pairs"]]

    correct = data.get("correct_answer")
    if qtype is QuestionType.TRUE_FALSE:
        correct = _canonical_bool(correct)
    elif correct is not None and not isinstance(correct, str):
        correct = json.dumps(correct, ensure_ascii=False)

    return Question(
        id=qid,
        question_type=qtype,
        correct_answer=correct,
        points=_points(data.get("points"), qid),
        quiz_id=data.get("quiz_id"),
        question_text=data.get("question_text") or "",
        difficulty=data.get("difficulty"),
        explanation=data.get("explanation"),
        order_index=_order_index(data.get("order_index"), qid),
        **fields,
    )


def check_passing_score(passing_score: Any) -> None:
    if isinstance(passing_score, bool) or not isinstance(passing_score, (int, float)):
        raise InvalidPassingScore(f"passing_score must be a number, got {passing_score!r}")
    if math.isnan(passing_score) or not 0 <= passing_score <= 100:
        raise InvalidPassingScore(f"passing_score must be within 0..100, got {passing_score!r}")


@dataclass
class Quiz:
    id: str
    title: str
    passing_score: float = 60
    description: str = ""
    difficulty: Optional[str] = None
    duration: int = 30             # minutes, advisory
    is_published: bool = False
    teacher_id: Optional[str] = None

    def __post_init__(self):
        check_passing_score(self.passing_score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty,
            "duration": self.duration,
            "passing_score": self.passing_score,
            "is_published": self.is_published,
            "teacher_id": self.teacher_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quiz":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            passing_score=data.get("passing_score", 60),
            description=data.get("description") or "",
            difficulty=data.get("difficulty"),
            duration=int(data.get("duration") or 30),
            is_published=bool(data.get("is_published", False)),
            teacher_id=data.get("teacher_id"),
        )


@dataclass(frozen=True)
class GradedAnswer:
    question_id: str
    student_answer: Any
    correct_answer: Optional[str]
    is_correct: bool
    points_earned: float
    points_possible: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "student_answer": self.student_answer,
            "correct_answer": self.correct_answer,
            "is_correct": self.is_correct,
            "points_earned": self.points_earned,
            "points_possible": self.points_possible,
        }


@dataclass(frozen=True)
class AttemptSummary:
    score: float
    total_points: float
    percentage: int
    passed: bool
    results: Tuple[GradedAnswer, ...] = field(default_factory=tuple)

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.results if r.is_correct)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "total_points": self.total_points,
            "percentage": self.percentage,
            "passed": self.passed,
            "answers": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True)
class GradeOutcome:
    summary: Optional[AttemptSummary] = None
    error: Optional[GradingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
