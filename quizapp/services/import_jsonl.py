import json
from pathlib import Path
from typing import List, Tuple

from quizapp.domain.errors import GradingError
from quizapp.domain.models import Question, Quiz, check_unique_ids, question_from_dict
from quizapp.services.config import JSONL_PATH, configure_logging
from quizapp.services.db import QuestionStore


def _parse_line(line: str) -> Tuple[Quiz, List[Question]]:
    """One JSONL line: a quiz object with its ``questions`` list."""
    data = json.loads(line)
    if not isinstance(data, dict) or "id" not in data:
        raise ValueError("line must be a quiz object with an id")
    quiz = Quiz.from_dict(data)
    questions = [
        question_from_dict({**q, "quiz_id": quiz.id, "order_index": i}, default_id=f"q{i + 1}")
        for i, q in enumerate(data.get("questions") or [])
    ]
    check_unique_ids(questions)
    return quiz, questions


def check_jsonl(path=JSONL_PATH) -> List[Tuple[int, str]]:
    """Return (line number, problem) for every line that would fail to import."""
    problems: List[Tuple[int, str]] = []
    for i, line in enumerate(Path(path).read_text(encoding="utf-8").splitlines(), 1):
        stripped = line.strip()
        if not stripped:
            problems.append((i, "blank line"))
            continue
        if stripped.endswith("},"):
            problems.append((i, "trailing comma"))
            continue
        try:
            _parse_line(stripped)
        except json.JSONDecodeError as e:
            problems.append((i, f"invalid JSON: {e.msg}"))
        except GradingError as e:
            problems.append((i, f"question {e.question_id}: {e.message}" if e.question_id else e.message))
        except (ValueError, KeyError, TypeError) as e:
            problems.append((i, str(e)))
    return problems


def import_jsonl(path=JSONL_PATH, store: QuestionStore | None = None) -> int:
    """Import every quiz in the file; nothing is written unless all lines parse."""
    src = Path(path)
    if not src.exists():
        raise FileNotFoundError(src)
    store = store or QuestionStore()

    parsed = []
    for i, line in enumerate(src.read_text(encoding="utf-8").splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        try:
            parsed.append(_parse_line(line))
        except (ValueError, KeyError, TypeError) as e:
            raise ValueError(f"{src}:{i}: {e}") from e

    for quiz, questions in parsed:
        store.save_quiz(quiz)
        store.save_questions(quiz.id, questions)
    return len(parsed)


if __name__ == "__main__":
    configure_logging()
    bad = check_jsonl()
    if bad:
        for lineno, msg in bad:
            print(f"line {lineno}: {msg}")
        raise SystemExit(1)
    print("imported quizzes:", import_jsonl())
