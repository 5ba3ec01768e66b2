import json

import pytest

from quizapp.services.import_jsonl import check_jsonl, import_jsonl

QUIZ = {
    "id": "bio-1",
    "title": "Cells",
    "passing_score": 60,
    "is_published": True,
    "questions": [
        {"question_type": "fill_in_blank", "blanks": ["nucleus"], "points": 2},
        {"id": "tf", "question_type": "true_false", "correct_answer": "false"},
    ],
}


def _write(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_import_jsonl(tmp_path, question_store):
    src = _write(tmp_path / "quizzes.jsonl", [json.dumps(QUIZ), "", json.dumps({"id": "x", "title": "X"})])
    assert import_jsonl(src, question_store) == 2

    quiz = question_store.get_quiz("bio-1")
    assert quiz.passing_score == 60
    assert quiz.is_published is True
    loaded = question_store.load_questions("bio-1")
    assert [q.id for q in loaded] == ["q1", "tf"]
    assert loaded[0].blanks == ["nucleus"]
    assert question_store.load_questions("x") == []


def test_import_is_all_or_nothing(tmp_path, question_store):
    bad = dict(QUIZ, id="bad", questions=[{"question_type": "multiple_choice", "correct_answer": "a"}])
    src = _write(tmp_path / "quizzes.jsonl", [json.dumps(QUIZ), json.dumps(bad)])
    with pytest.raises(ValueError, match=":2:"):
        import_jsonl(src, question_store)
    assert question_store.list_quizzes() == []


def test_import_missing_file(tmp_path, question_store):
    with pytest.raises(FileNotFoundError):
        import_jsonl(tmp_path / "nope.jsonl", question_store)


def test_check_jsonl_reports_problems(tmp_path):
    src = _write(tmp_path / "quizzes.jsonl", [
        json.dumps(QUIZ),
        "   ",
        json.dumps(QUIZ) + ",",
        "{not json",
        json.dumps({"id": "q", "questions": [{"id": "z", "question_type": "essay"}]}),
        json.dumps(["no", "id"]),
    ])
    problems = check_jsonl(src)
    assert [n for n, _ in problems] == [2, 3, 4, 5, 6]
    assert problems[0][1] == "blank line"
    assert problems[1][1] == "trailing comma"
    assert problems[2][1].startswith("invalid JSON")
    assert problems[3][1].startswith("question z")


@pytest.mark.parametrize("passing_score", [None, 150, "abc"])
def test_invalid_passing_score_blocks_whole_import(tmp_path, question_store, passing_score):
    bad = {"id": "b", "title": "B", "passing_score": passing_score}
    src = _write(tmp_path / "quizzes.jsonl", [json.dumps(QUIZ), json.dumps(bad)])
    problems = check_jsonl(src)
    assert [n for n, _ in problems] == [2]
    assert "passing_score" in problems[0][1]
    with pytest.raises(ValueError, match=":2:"):
        import_jsonl(src, question_store)
    assert question_store.list_quizzes() == []


def test_repeated_question_id_blocks_whole_import(tmp_path, question_store):
    twins = dict(QUIZ, id="twins", questions=[
        {"id": "a", "question_type": "short_answer"},
        {"id": "a", "question_type": "long_answer"},
    ])
    src = _write(tmp_path / "quizzes.jsonl", [json.dumps(QUIZ), json.dumps(twins)])
    assert check_jsonl(src) == [(2, "question a: question id 'a' is used more than once")]
    with pytest.raises(ValueError, match=":2:"):
        import_jsonl(src, question_store)
    assert question_store.list_quizzes() == []
