import datetime as dt
import logging
from typing import Any, Mapping, Optional

from quizapp.domain.models import AttemptSummary
from quizapp.services.attempts import AttemptStore
from quizapp.services.db import QuestionStore
from quizapp.services.grader import grade

logger = logging.getLogger(__name__)


def submit_attempt(
    question_store: QuestionStore,
    attempt_store: AttemptStore,
    quiz_id: str,
    student_id: str,
    answers: Mapping[str, Any],
    completed_at: dt.datetime,
    started_at: Optional[dt.datetime] = None,
) -> AttemptSummary:
    """Grade a finished attempt and append it to the attempt log.

    Nothing is written when grading fails; the GradingError reaches the caller.
    """
    quiz = question_store.get_quiz(quiz_id)
    if quiz is None:
        raise LookupError(f"quiz not found: {quiz_id}")

    summary = grade(question_store.load_questions(quiz_id), answers, quiz.passing_score)
    attempt_store.record_attempt(quiz_id, student_id, summary, completed_at=completed_at, started_at=started_at)
    logger.info("student %s finished %s: %s/%s passed=%s",
                student_id, quiz_id, summary.score, summary.total_points, summary.passed)
    return summary
