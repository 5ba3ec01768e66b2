from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    MALFORMED_QUESTION = "malformed_question"
    EMPTY_QUESTION_SET = "empty_question_set"
    UNKNOWN_QUESTION_TYPE = "unknown_question_type"
    INVALID_PASSING_SCORE = "invalid_passing_score"


class GradingError(ValueError):
    """Base class for everything that stops an attempt from being graded."""

    kind: ErrorKind = ErrorKind.MALFORMED_QUESTION

    def __init__(self, message: str, question_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.question_id = question_id

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "message": self.message,
            "question_id": self.question_id,
        }


class MalformedQuestion(GradingError):
    kind = ErrorKind.MALFORMED_QUESTION


class EmptyQuestionSet(GradingError):
    kind = ErrorKind.EMPTY_QUESTION_SET


class UnknownQuestionType(GradingError):
    kind = ErrorKind.UNKNOWN_QUESTION_TYPE


class InvalidPassingScore(GradingError):
    kind = ErrorKind.INVALID_PASSING_SCORE


class GenerationError(RuntimeError):
    """The text-generation service gave us nothing we can turn into questions."""
