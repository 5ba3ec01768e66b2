# services/attempts.py (append-only attempt log)
from __future__ import annotations

import datetime as dt
import json
import logging
from pathlib import Path
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text, create_engine, select
from sqlalchemy.orm import Mapped, Session, declarative_base, mapped_column, sessionmaker

from quizapp.domain.models import AttemptSummary
from quizapp.services.config import DATABASE_URL, configure_logging

logger = logging.getLogger(__name__)

Base = declarative_base()


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quiz_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    total_points: Mapped[float] = mapped_column(Float, nullable=False)
    percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_taken: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # seconds
    answers_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="completed")
    started_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)

    @property
    def answers(self) -> list:
        return json.loads(self.answers_json or "[]")

    def to_dict(self):
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "student_id": self.student_id,
            "score": self.score,
            "total_points": self.total_points,
            "percentage": self.percentage,
            "passed": self.passed,
            "time_taken": self.time_taken,
            "answers": self.answers,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def _ensure_sqlite_dir(url: str):
    if url.startswith("sqlite:///") and url != "sqlite:///:memory:":
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)


class AttemptStore:
    def __init__(self, database_url: str = DATABASE_URL):
        self.database_url = database_url
        _ensure_sqlite_dir(database_url)
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self.engine = create_engine(database_url, echo=False, future=True, connect_args=connect_args)
        self._session_factory = sessionmaker(bind=self.engine, autoflush=False, autocommit=False,
                                             expire_on_commit=False, future=True)
        Base.metadata.create_all(self.engine)

    def session(self) -> Session:
        return self._session_factory()

    def record_attempt(
        self,
        quiz_id: str,
        student_id: str,
        summary: AttemptSummary,
        completed_at: dt.datetime,
        started_at: Optional[dt.datetime] = None,
    ) -> QuizAttempt:
        qid = (quiz_id or "").strip()
        sid = (student_id or "").strip()
        if not qid:
            raise ValueError("quiz_id required")
        if not sid:
            raise ValueError("student_id required")
        if completed_at is None:
            raise ValueError("completed_at required")

        time_taken = None
        if started_at is not None:
            time_taken = max(0, int((completed_at - started_at).total_seconds()))

        payload = summary.to_dict()
        attempt = QuizAttempt(
            quiz_id=qid,
            student_id=sid,
            score=summary.score,
            total_points=summary.total_points,
            percentage=summary.percentage,
            passed=summary.passed,
            time_taken=time_taken,
            answers_json=json.dumps(payload["answers"], ensure_ascii=False),
            status="completed",
            started_at=started_at,
            completed_at=completed_at,
        )
        with self.session() as db:
            db.add(attempt)
            db.commit()
            db.refresh(attempt)
        logger.info("recorded attempt %s: quiz=%s student=%s %d%%", attempt.id, qid, sid, summary.percentage)
        return attempt

    def list_attempts(self, quiz_id: Optional[str] = None, student_id: Optional[str] = None) -> List[QuizAttempt]:
        stmt = select(QuizAttempt).where(QuizAttempt.status == "completed")
        if quiz_id is not None:
            stmt = stmt.where(QuizAttempt.quiz_id == quiz_id)
        if student_id is not None:
            stmt = stmt.where(QuizAttempt.student_id == student_id)
        stmt = stmt.order_by(QuizAttempt.completed_at, QuizAttempt.id)
        with self.session() as db:
            return list(db.scalars(stmt).all())


if __name__ == "__main__":
    configure_logging()
    store = AttemptStore()
    print(f"DB initialized at: {store.database_url}")
