import logging
import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_ROOT = Path(__file__).resolve().parents[2]


def _get(key: str, default: str | None = None) -> str | None:
    # environment (.env already merged in) > default
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


# "cloud" keeps sqlite files in the temp dir (read-only app dirs)
RUN_ENV = _get("QUIZ_ENV", "local")

# OpenAI / compatible API (Groq works through OPENAI_BASE_URL)
OPENAI_API_KEY = _get("OPENAI_API_KEY", "")
OPENAI_BASE_URL = _get("OPENAI_BASE_URL", "")
OPENAI_MODEL = _get("OPENAI_MODEL", "gpt-4o-mini")

if RUN_ENV == "cloud":
    _DATA_DIR = Path(tempfile.gettempdir())
else:
    _DATA_DIR = _ROOT / "data"

DB_PATH = Path(_get("QUIZ_DB_PATH", str(_DATA_DIR / "quiz.db")))
DATABASE_URL = _get("DATABASE_URL", f"sqlite:///{(_DATA_DIR / 'attempts.db').as_posix()}")
JSONL_PATH = Path(_get("QUIZ_JSONL_PATH", str(_ROOT / "data" / "quizzes.jsonl")))

LOG_LEVEL = _get("LOG_LEVEL", "INFO")


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
