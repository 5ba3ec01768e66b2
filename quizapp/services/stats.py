from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from quizapp.services.grader import round_half_up


@dataclass(frozen=True)
class LeaderboardEntry:
    student_id: str
    average_score: int
    best_score: int
    total_attempts: int


def _get(attempt: Any, name: str, default=None):
    # accepts QuizAttempt rows as well as their dict form
    if isinstance(attempt, dict):
        return attempt.get(name, default)
    return getattr(attempt, name, default)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def leaderboard(attempts: Iterable[Any]) -> List[LeaderboardEntry]:
    """Rank students by their average percentage across completed attempts."""
    by_student: Dict[str, List[float]] = {}
    for a in attempts:
        by_student.setdefault(_get(a, "student_id"), []).append(_get(a, "percentage", 0))

    entries = [
        LeaderboardEntry(
            student_id=sid,
            average_score=round_half_up(_mean(scores)),
            best_score=max(scores),
            total_attempts=len(scores),
        )
        for sid, scores in by_student.items()
    ]
    entries.sort(key=lambda e: e.average_score, reverse=True)
    return entries


def quiz_analytics(attempts: Iterable[Any]) -> Dict[str, Any]:
    attempts = list(attempts)
    total = len(attempts)
    if not total:
        return {"total_attempts": 0, "avg_score": 0.0, "pass_rate": 0.0, "total_students": 0}
    passed = sum(1 for a in attempts if _get(a, "passed"))
    return {
        "total_attempts": total,
        "avg_score": round_half_up(_mean([_get(a, "percentage", 0) for a in attempts]) * 10) / 10,
        "pass_rate": round_half_up(passed / total * 1000) / 10,
        "total_students": len({_get(a, "student_id") for a in attempts}),
    }


def quiz_performance(quizzes: Iterable[Any], attempts: Iterable[Any]) -> List[Dict[str, Any]]:
    by_quiz: Dict[str, List[float]] = {}
    for a in attempts:
        by_quiz.setdefault(_get(a, "quiz_id"), []).append(_get(a, "percentage", 0))
    out = []
    for q in quizzes:
        scores = by_quiz.get(_get(q, "id"), [])
        out.append({
            "quiz_id": _get(q, "id"),
            "title": _get(q, "title", ""),
            "avg_score": round_half_up(_mean(scores)) if scores else 0,
            "attempts": len(scores),
        })
    return out


def student_progress(attempts: Iterable[Any]) -> Dict[str, Any]:
    attempts = list(attempts)
    if not attempts:
        return {
            "total_attempts": 0,
            "average_score": 0,
            "best_score": 0,
            "total_points_earned": 0,
            "total_points_available": 0,
        }
    scores = [_get(a, "percentage", 0) for a in attempts]
    return {
        "total_attempts": len(attempts),
        "average_score": round_half_up(_mean(scores)),
        "best_score": max(scores),
        "total_points_earned": round_half_up(sum(_get(a, "score", 0) for a in attempts)),
        "total_points_available": sum(_get(a, "total_points", 0) for a in attempts),
    }


def best_scores_by_quiz(attempts: Iterable[Any]) -> Dict[str, float]:
    best: Dict[str, float] = {}
    for a in attempts:
        total = _get(a, "total_points", 0)
        if not total:
            continue
        qid = _get(a, "quiz_id")
        best[qid] = max(best.get(qid, 0.0), _get(a, "score", 0) / total * 100)
    return best
