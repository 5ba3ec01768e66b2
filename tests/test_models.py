import pytest

from quizapp.domain.errors import InvalidPassingScore, MalformedQuestion, UnknownQuestionType
from quizapp.domain.models import MatchPair, Question, QuestionType, Quiz, question_from_dict


def test_question_type_is_parsed_from_string():
    q = Question(id="Q1", question_type=" Short_Answer ", correct_answer=None)
    assert q.question_type is QuestionType.SHORT_ANSWER
    assert q.points == 1


def test_unknown_question_type():
    with pytest.raises(UnknownQuestionType) as exc:
        Question(id="Q1", question_type="code_writing", correct_answer=None)
    assert exc.value.question_id == "Q1"


@pytest.mark.parametrize("points", [0, -2, True, "3", None, float("inf"), float("nan")])
def test_points_must_be_positive_number(points):
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="short_answer", correct_answer=None, points=points)


def test_empty_id_rejected():
    with pytest.raises(MalformedQuestion):
        Question(id="", question_type="short_answer", correct_answer=None)


def test_multiple_choice_requires_options_containing_answer():
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="multiple_choice", correct_answer="A")
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="multiple_choice", correct_answer="E",
                 options=["A", "B", "C", "D"])
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="multiple_choice", correct_answer="A", options=["A"])


def test_per_type_fields_are_exclusive():
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="multiple_choice", correct_answer="A",
                 options=["A", "B"], blanks=["x"])
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="short_answer", correct_answer=None, options=["A", "B"])
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="true_false", correct_answer="true",
                 match_pairs=[MatchPair("a", "b")])


def test_true_false_answer_must_be_canonical():
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="true_false", correct_answer="yes")


def test_fill_in_blank_requires_blanks():
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="fill_in_blank", correct_answer=None, blanks=[])
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="fill_in_blank", correct_answer=None, blanks=["a", 3])


def test_match_following_left_values_unique():
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="match_following", correct_answer=None,
                 match_pairs=[MatchPair("A", "1"), MatchPair("A", "2")])
    with pytest.raises(MalformedQuestion):
        Question(id="Q1", question_type="match_following", correct_answer=None)


def test_from_dict_normalises_loose_generator_output():
    q = question_from_dict({
        "question_text": "Water boils at 100C at sea level.",
        "question_type": "true_false",
        "correct_answer": "True",
        "options": [],
        "blanks": None,
        "match_pairs": [],
        "points": "2",
    }, default_id="q7")
    assert q.id == "q7"
    assert q.correct_answer == "true"
    assert q.options is None and q.match_pairs is None
    assert q.points == 2.0

    tf = question_from_dict({"id": "b", "question_type": "true_false", "correct_answer": False})
    assert tf.correct_answer == "false"


def test_from_dict_reads_pairs_and_json_blanks():
    m = question_from_dict({
        "id": "m1", "question_type": "match_following",
        "match_pairs": [{"left": "H2O", "right": "water"}, ["NaCl", "salt"]],
    })
    assert m.match_pairs == [MatchPair("H2O", "water"), MatchPair("NaCl", "salt")]

    f = question_from_dict({"id": "f1", "question_type": "fill_in_blank", "blanks": '["a", "b"]'})
    assert f.blanks == ["a", "b"]


def test_from_dict_keeps_populated_foreign_field_malformed():
    with pytest.raises(MalformedQuestion):
        question_from_dict({"id": "s", "question_type": "short_answer", "blanks": ["x"]})
    with pytest.raises(MalformedQuestion):
        question_from_dict({"id": "m", "question_type": "match_following", "match_pairs": [{"left": "a"}]})
    with pytest.raises(MalformedQuestion):
        question_from_dict(["not", "a", "dict"])


def test_question_dict_round_trip():
    q = Question(id="Q1", quiz_id="quiz-1", question_type="match_following", correct_answer=None,
                 match_pairs=[MatchPair("A", "1")], points=3, explanation="because", order_index=2)
    assert question_from_dict(q.to_dict()) == q


def test_quiz_from_dict_defaults():
    quiz = Quiz.from_dict({"id": 5, "title": "Cells"})
    assert quiz.id == "5"
    assert quiz.passing_score == 60
    assert quiz.duration == 30
    assert quiz.is_published is False
    assert Quiz.from_dict(quiz.to_dict()) == quiz


def test_from_dict_rejects_infinite_points():
    with pytest.raises(MalformedQuestion) as exc:
        question_from_dict({"id": "Q1", "question_type": "short_answer", "points": "inf"})
    assert exc.value.question_id == "Q1"


def test_from_dict_rejects_non_integer_order_index():
    with pytest.raises(MalformedQuestion) as exc:
        question_from_dict({"id": "Q1", "question_type": "short_answer", "order_index": "first"})
    assert exc.value.question_id == "Q1"
    assert question_from_dict({"id": "Q1", "question_type": "short_answer", "order_index": "3"}).order_index == 3


@pytest.mark.parametrize("passing_score", [None, 150, -5, "abc", True, float("nan")])
def test_quiz_rejects_invalid_passing_score(passing_score):
    with pytest.raises(InvalidPassingScore):
        Quiz(id="quiz-1", title="Cells", passing_score=passing_score)
    with pytest.raises(InvalidPassingScore):
        Quiz.from_dict({"id": "quiz-1", "title": "Cells", "passing_score": passing_score})


def test_quiz_accepts_boundary_passing_scores():
    assert Quiz(id="a", title="A", passing_score=0).passing_score == 0
    assert Quiz(id="b", title="B", passing_score=100.0).passing_score == 100.0
