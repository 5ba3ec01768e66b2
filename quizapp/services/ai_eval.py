import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from openai import OpenAI

from quizapp.domain.errors import GenerationError, GradingError
from quizapp.domain.models import Question, QuestionType, parse_question_type, question_from_dict
from quizapp.services.config import OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_MODEL

logger = logging.getLogger(__name__)

NO_EXPLANATION = "No explanation generated."

_client = None


def get_client():
    """Shared OpenAI-compatible client, or None when no key is configured."""
    global _client
    if _client is None and OPENAI_API_KEY:
        # empty base_url -> official endpoint
        _client = OpenAI(api_key=OPENAI_API_KEY, base_url=(OPENAI_BASE_URL or None))
    return _client


def _chat(client, messages: List[Dict[str, str]], *, model: Optional[str], temperature: float,
          max_tokens: Optional[int] = None) -> str:
    kwargs: Dict[str, Any] = {
        "model": model or OPENAI_MODEL,
        "messages": messages,
        "temperature": temperature,
    }
    if max_tokens:
        kwargs["max_tokens"] = max_tokens
    resp = client.chat.completions.create(**kwargs)
    return (resp.choices[0].message.content or "").strip()


def _answer_text(q: Question) -> str:
    if q.question_type is QuestionType.FILL_IN_BLANK:
        return ", ".join(q.blanks)
    if q.question_type is QuestionType.MATCH_FOLLOWING:
        return "; ".join(f"{p.left} -> {p.right}" for p in q.match_pairs)
    return q.correct_answer or ""


# === explanation for a graded question ===

def explain_answer(question: Question, client=None, model: Optional[str] = None) -> str:
    fallback = (question.explanation or "").strip() or NO_EXPLANATION
    client = client or get_client()
    if client is None:
        return fallback

    prompt = (
        "Generate a brief and clear explanation for the following quiz question:\n"
        f"Question: {question.question_text}\n"
        f"Correct Answer: {_answer_text(question)}\n"
        f"Type: {question.question_type.value}\n"
    )
    try:
        text = _chat(client, [{"role": "user", "content": prompt}], model=model, temperature=0.2)
    except Exception as e:
        logger.warning("explanation request failed for %s: %s", question.id, e)
        return fallback
    return text or fallback


# === quiz generation ===

GENERATION_SYSTEM_PROMPT = (
    "You are a quiz generator that returns only valid JSON. "
    "Never include markdown code blocks or explanations."
)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def build_generation_prompt(title: str, description: str, difficulty: str,
                            question_types: Sequence[str], num_questions: int,
                            context: Optional[str] = None) -> str:
    types = ", ".join(question_types)
    return f"""You are an expert quiz generator. Generate a quiz based on the following context and requirements.

CONTEXT FROM DOCUMENTS:
{context or "No specific context available. Generate general questions on the topic."}

QUIZ REQUIREMENTS:
- Title: {title}
- Description: {description}
- Difficulty: {difficulty}
- Number of questions: {num_questions}
- Question types to include: {types}

Generate exactly {num_questions} questions. For each question, provide:
1. Question text
2. Question type (one of: {types})
3. Correct answer ("true" or "false" for true_false)
4. For multiple_choice: 4 options (one of them equal to the correct answer)
5. For fill_in_blank: the blank answers as an array
6. For match_following: pairs of items to match
7. Points (1-5 based on difficulty)
8. Explanation of the answer

Return ONLY a valid JSON object with this structure:
{{
  "questions": [
    {{
      "question_text": "string",
      "question_type": "multiple_choice|fill_in_blank|true_false|short_answer|long_answer|match_following",
      "difficulty": "easy|medium|hard|advanced",
      "correct_answer": "string",
      "options": ["option1", "option2", "option3", "option4"],
      "blanks": ["blank1", "blank2"],
      "match_pairs": [{{"left": "item1", "right": "match1"}}],
      "points": 1,
      "explanation": "string"
    }}
  ]
}}"""


def parse_generated(content: str, difficulty: Optional[str] = None) -> List[Question]:
    text = _FENCE.sub("", (content or "").strip())
    m = re.search(r"\{.*\}", text, flags=re.S)
    try:
        data = json.loads(m.group(0) if m else text)
    except json.JSONDecodeError as e:
        raise GenerationError(f"generator reply is not JSON: {e}") from e

    items = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(items, list) or not items:
        raise GenerationError("generator reply has no questions")

    out: List[Question] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise GenerationError(f"question {i + 1} is not an object")
        item = {**item, "id": f"q{i + 1}", "order_index": i}
        item.setdefault("difficulty", difficulty)
        try:
            out.append(question_from_dict(item))
        except GradingError as e:
            raise GenerationError(f"question {i + 1} rejected: {e.message}") from e
    return out


def generate_questions(
    title: str,
    description: str,
    difficulty: str,
    question_types: Sequence[str],
    num_questions: int,
    context: Optional[str] = None,
    client=None,
    model: Optional[str] = None,
) -> List[Question]:
    if num_questions < 1:
        raise ValueError("num_questions must be at least 1")
    if not question_types:
        raise ValueError("question_types required")
    types = [parse_question_type(t).value for t in question_types]

    client = client or get_client()
    if client is None:
        raise GenerationError("no text-generation client configured (OPENAI_API_KEY)")

    prompt = build_generation_prompt(title, description, difficulty, types, num_questions, context)
    try:
        content = _chat(
            client,
            [
                {"role": "system", "content": GENERATION_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            model=model,
            temperature=0.7,
            max_tokens=8000,
        )
    except Exception as e:
        raise GenerationError(f"generation request failed: {e}") from e

    questions = parse_generated(content, difficulty)
    if len(questions) != num_questions:
        logger.warning("asked for %d questions, generator returned %d", num_questions, len(questions))
    return questions
