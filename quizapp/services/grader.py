import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple, Union

from quizapp.domain.errors import EmptyQuestionSet, GradingError
from quizapp.domain.models import (
    AttemptSummary,
    GradedAnswer,
    GradeOutcome,
    Question,
    QuestionType,
    check_passing_score,
    check_unique_ids,
    question_from_dict,
)

logger = logging.getLogger(__name__)

QuestionLike = Union[Question, Dict[str, Any]]


def _normalize_blank(value: str) -> str:
    return value.strip().lower()


def _grade_exact(q: Question, submitted: Any) -> Tuple[bool, float]:
    # multiple_choice / true_false: no case folding, no trimming
    ok = isinstance(submitted, str) and submitted == q.correct_answer
    return ok, q.points if ok else 0


def _grade_fill_in_blank(q: Question, submitted: Any) -> Tuple[bool, float]:
    if not isinstance(submitted, (list, tuple)):
        return False, 0
    ok = all(
        i < len(submitted)
        and isinstance(submitted[i], str)
        and _normalize_blank(submitted[i]) == _normalize_blank(blank)
        for i, blank in enumerate(q.blanks)
    )
    return ok, q.points if ok else 0


def _grade_match_following(q: Question, submitted: Any) -> Tuple[bool, float]:
    pairs = q.match_pairs
    if not pairs:
        return False, 0
    chosen = submitted if isinstance(submitted, Mapping) else {}
    correct = sum(1 for p in pairs if chosen.get(p.left) == p.right)
    return correct == len(pairs), q.points * (correct / len(pairs))


def _grade_free_text(q: Question, submitted: Any) -> Tuple[bool, float]:
    # presence only; content goes to manual review
    ok = isinstance(submitted, str) and bool(submitted.strip())
    return ok, q.points if ok else 0


_RULES: Dict[QuestionType, Callable[[Question, Any], Tuple[bool, float]]] = {
    QuestionType.MULTIPLE_CHOICE: _grade_exact,
    QuestionType.TRUE_FALSE: _grade_exact,
    QuestionType.FILL_IN_BLANK: _grade_fill_in_blank,
    QuestionType.MATCH_FOLLOWING: _grade_match_following,
    QuestionType.SHORT_ANSWER: _grade_free_text,
    QuestionType.LONG_ANSWER: _grade_free_text,
}

_missing = set(QuestionType) - set(_RULES)
if _missing:
    raise RuntimeError(f"no grading rule for {sorted(t.value for t in _missing)}")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grade_question(question: Question, submitted: Any) -> GradedAnswer:
    is_correct, earned = _RULES[question.question_type](question, submitted)
    return GradedAnswer(
        question_id=question.id,
        student_answer=submitted,
        correct_answer=question.correct_answer,
        is_correct=is_correct,
        points_earned=earned,
        points_possible=question.points,
    )


def _coerce(questions: Iterable[QuestionLike]) -> List[Question]:
    out: List[Question] = []
    for i, q in enumerate(questions or []):
        out.append(q if isinstance(q, Question) else question_from_dict(q, default_id=f"q{i + 1}"))
    check_unique_ids(out)
    return out


def grade(
    questions: Iterable[QuestionLike],
    answers: Mapping[str, Any],
    passing_score: float,
) -> AttemptSummary:
    """Grade one attempt.

    ``answers`` is keyed by question id; a missing key grades the same as an
    empty submission. Any malformed question, a repeated question id, an empty
    question list or an out-of-range ``passing_score`` rejects the whole
    attempt with a :class:`GradingError` rather than producing a partial
    summary.
    """
    qs = _coerce(questions)
    if not qs:
        raise EmptyQuestionSet("cannot grade a quiz without questions")
    check_passing_score(passing_score)
    answers = answers or {}

    results = tuple(grade_question(q, answers.get(q.id)) for q in qs)
    total_points = sum(r.points_possible for r in results)
    score = sum(r.points_earned for r in results)
    percentage = round_half_up(score / total_points * 100)

    logger.debug("graded %d questions: %s/%s (%d%%)", len(results), score, total_points, percentage)
    return AttemptSummary(
        score=score,
        total_points=total_points,
        percentage=percentage,
        passed=percentage >= passing_score,
        results=results,
    )


def try_grade(
    questions: Iterable[QuestionLike],
    answers: Mapping[str, Any],
    passing_score: float,
) -> GradeOutcome:
    try:
        return GradeOutcome(summary=grade(questions, answers, passing_score))
    except GradingError as e:
        logger.warning("grading rejected (%s): %s [question=%s]", e.kind.value, e.message, e.question_id)
        return GradeOutcome(error=e)
