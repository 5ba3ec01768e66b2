# quizapp/services/db.py
import json
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from quizapp.domain.models import Question, Quiz, check_unique_ids, question_from_dict
from quizapp.services.config import DB_PATH
from quizapp.services.db_init import init_db

logger = logging.getLogger(__name__)

_QUESTION_COLUMNS = (
    "id, quiz_id, question_text, question_type, difficulty, correct_answer, "
    "options_json, blanks_json, match_pairs_json, points, explanation, order_index"
)
_QUIZ_COLUMNS = "id, title, description, difficulty, duration, passing_score, is_published, teacher_id"

# ---- internal helpers ----


def _dump(value) -> Optional[str]:
    return None if value is None else json.dumps(value, ensure_ascii=False)


def _load(value) -> Optional[list]:
    return json.loads(value) if value else None


def _points(value: float):
    # keep integral points as int so they round-trip unchanged
    return int(value) if float(value).is_integer() else value


def _row_to_question(r) -> Question:
    # rows were validated on write; parsing again catches hand-edited databases
    return question_from_dict({
        "id": r[0],
        "quiz_id": r[1],
        "question_text": r[2],
        "question_type": r[3],
        "difficulty": r[4],
        "correct_answer": r[5],
        "options": _load(r[6]),
        "blanks": _load(r[7]),
        "match_pairs": _load(r[8]),
        "points": _points(r[9]),
        "explanation": r[10],
        "order_index": r[11],
    })


def _row_to_quiz(r) -> Quiz:
    return Quiz(
        id=r[0],
        title=r[1],
        description=r[2] or "",
        difficulty=r[3],
        duration=r[4] if r[4] is not None else 30,
        passing_score=r[5],
        is_published=bool(r[6]),
        teacher_id=r[7],
    )


# ---- public API ----


class QuestionStore:
    """Quizzes and their questions in a local sqlite file."""

    def __init__(self, db_path=DB_PATH):
        self.db_path = init_db(Path(db_path))

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def save_quiz(self, quiz: Quiz) -> Quiz:
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO quizzes ({_QUIZ_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    quiz.id, quiz.title, quiz.description, quiz.difficulty, quiz.duration,
                    quiz.passing_score, int(quiz.is_published), quiz.teacher_id,
                ),
            )
            conn.commit()
        return quiz

    def get_quiz(self, quiz_id: str) -> Optional[Quiz]:
        with self._connect() as conn:
            row = conn.execute(f"SELECT {_QUIZ_COLUMNS} FROM quizzes WHERE id=?", (quiz_id,)).fetchone()
        return _row_to_quiz(row) if row else None

    def list_quizzes(self, published_only: bool = False, teacher_id: Optional[str] = None) -> List[Quiz]:
        sql = f"SELECT {_QUIZ_COLUMNS} FROM quizzes"
        where, params = [], []
        if published_only:
            where.append("is_published=1")
        if teacher_id is not None:
            where.append("teacher_id=?")
            params.append(teacher_id)
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY title, id"
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_quiz(r) for r in rows]

    def save_questions(self, quiz_id: str, questions: List[Question]) -> List[Question]:
        """Replace the quiz's question set; ``order_index`` follows list position."""
        if self.get_quiz(quiz_id) is None:
            raise LookupError(f"quiz not found: {quiz_id}")
        check_unique_ids(questions)
        saved: List[Question] = []
        with self._connect() as conn:
            conn.execute("DELETE FROM questions WHERE quiz_id=?", (quiz_id,))
            for idx, q in enumerate(questions):
                d = q.to_dict()
                conn.execute(
                    f"INSERT INTO questions ({_QUESTION_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        q.id, quiz_id, q.question_text, q.question_type.value, q.difficulty,
                        q.correct_answer, _dump(d["options"]), _dump(d["blanks"]),
                        _dump(d["match_pairs"]), q.points, q.explanation, idx,
                    ),
                )
                saved.append(question_from_dict({**d, "quiz_id": quiz_id, "order_index": idx}))
            conn.commit()
        logger.info("saved %d questions for quiz %s", len(saved), quiz_id)
        return saved

    def load_questions(self, quiz_id: str) -> List[Question]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_QUESTION_COLUMNS} FROM questions WHERE quiz_id=? ORDER BY order_index, id",
                (quiz_id,),
            ).fetchall()
        return [_row_to_question(r) for r in rows]

    def delete_quiz(self, quiz_id: str) -> bool:
        with self._connect() as conn:
            conn.execute("DELETE FROM questions WHERE quiz_id=?", (quiz_id,))
            cur = conn.execute("DELETE FROM quizzes WHERE id=?", (quiz_id,))
            conn.commit()
        return cur.rowcount > 0
