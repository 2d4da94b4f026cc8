"""Daily nutrition quiz generation and scoring."""

import logging
from dataclasses import dataclass
from uuid import uuid4

from nutrivision.domain.assistant import QuizQuestion
from nutrivision.services.assistant import AssistantClient

CORRECT_ANSWER_POINTS = 50
PARTICIPATION_POINTS = 10

QUIZ_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "question": {"type": "string"},
        "options": {"type": "array", "items": {"type": "string"}},
        "correct_answer": {"type": "integer", "minimum": 0, "maximum": 3},
        "explanation": {"type": "string"},
    },
    "required": ["question", "options", "correct_answer", "explanation"],
    "additionalProperties": False,
}

FALLBACK_QUIZ = QuizQuestion(
    id="fallback",
    question="Which macronutrient is the body's primary source of energy?",
    options=["Protein", "Carbohydrates", "Fats", "Water"],
    correct_answer=1,
    explanation=(
        "Carbohydrates are broken down into glucose, which is the main energy "
        "source for the body's cells."
    ),
)

_PROMPT = (
    "Generate a single multiple-choice question about nutrition, healthy "
    "eating, or fitness science. Provide 4 options, the index (0-3) of the "
    "correct answer, and a short explanation."
)

_logger = logging.getLogger(__name__)


@dataclass
class QuizService:
    """Service producing the daily challenge question."""

    client: AssistantClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def generate_daily_quiz(self) -> QuizQuestion:
        """Return a fresh quiz question, or the fallback question on failure."""
        try:
            raw = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=_PROMPT,
                schema_name="daily_quiz",
                schema=QUIZ_SCHEMA,
            )
            quiz = QuizQuestion.model_validate({"id": str(uuid4()), **raw})
        except Exception:
            _logger.exception("Quiz generation failed; using fallback question")
            return FALLBACK_QUIZ
        if len(quiz.options) != 4 or not 0 <= quiz.correct_answer < 4:
            _logger.warning("Quiz generation returned %s options", len(quiz.options))
            return FALLBACK_QUIZ
        return quiz


def points_for_answer(quiz: QuizQuestion, option_index: int) -> int:
    """Return points earned for an answer; wrong answers still earn some."""
    if option_index == quiz.correct_answer:
        return CORRECT_ANSWER_POINTS
    return PARTICIPATION_POINTS
