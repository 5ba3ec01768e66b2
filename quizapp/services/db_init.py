import sqlite3
from pathlib import Path

from quizapp.services.config import DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS quizzes (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    difficulty TEXT,
    duration INTEGER,
    passing_score REAL NOT NULL,
    is_published INTEGER NOT NULL DEFAULT 0,
    teacher_id TEXT
);
CREATE TABLE IF NOT EXISTS questions (
    id TEXT NOT NULL,
    quiz_id TEXT NOT NULL REFERENCES quizzes(id) ON DELETE CASCADE,
    question_text TEXT,
    question_type TEXT NOT NULL,
    difficulty TEXT,
    correct_answer TEXT,
    options_json TEXT,
    blanks_json TEXT,
    match_pairs_json TEXT,
    points REAL NOT NULL,
    explanation TEXT,
    order_index INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (quiz_id, id)
);
CREATE INDEX IF NOT EXISTS ix_questions_quiz_order ON questions (quiz_id, order_index);
"""


def init_db(db_path=DB_PATH) -> Path:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.executescript(SCHEMA)
        conn.commit()
    return db_path


if __name__ == "__main__":
    print("initialized:", init_db())
