import pytest

from quizapp.domain.models import MatchPair, Question, Quiz
from quizapp.services.attempts import AttemptStore
from quizapp.services.db import QuestionStore


@pytest.fixture
def question_store(tmp_path):
    return QuestionStore(tmp_path / "quiz.db")


@pytest.fixture
def attempt_store(tmp_path):
    return AttemptStore(f"sqlite:///{(tmp_path / 'attempts.db').as_posix()}")


@pytest.fixture
def quiz():
    return Quiz(id="geo-1", title="Capitals", passing_score=70, duration=10,
                is_published=True, teacher_id="t-1")


@pytest.fixture
def questions():
    return [
        Question(id="q1", question_type="multiple_choice", correct_answer="Paris",
                 options=["London", "Paris", "Rome", "Berlin"], points=5,
                 question_text="Capital of France?"),
        Question(id="q2", question_type="match_following", correct_answer=None,
                 match_pairs=[MatchPair("Italy", "Rome"), MatchPair("Spain", "Madrid")], points=5),
        Question(id="q3", question_type="fill_in_blank", correct_answer=None,
                 blanks=["Berlin"], points=2),
        Question(id="q4", question_type="long_answer", correct_answer=None, points=3),
    ]
