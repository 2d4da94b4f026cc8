"""Food image analysis using LLMs."""

import base64
from dataclasses import dataclass

from nutrivision.domain.assistant import FoodAnalysis
from nutrivision.services.assistant import AssistantClient

FOOD_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "portion_size": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "calories": {"type": "number"},
        "protein": {"type": "number"},
        "carbs": {"type": "number"},
        "fats": {"type": "number"},
        "analysis": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": [
        "name",
        "portion_size",
        "confidence",
        "calories",
        "protein",
        "carbs",
        "fats",
        "analysis",
    ],
    "additionalProperties": False,
}

_PROMPT = (
    "Analyze this image and identify the food items present. "
    "Estimate the portion size and nutritional content for the entire visible "
    "dish. Return the dish name, an estimated portion (e.g. 1 bowl, 200g), "
    "your confidence (0-1), calories, protein, carbs and fats in grams, and a "
    "short description of what was detected."
)


@dataclass
class VisionService:
    """Service that prepares food analysis prompts and validates results."""

    client: AssistantClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, image_bytes: bytes) -> FoodAnalysis:
        """Estimate the nutrition of the dish in an image."""
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=_PROMPT,
            schema_name="food_analysis",
            schema=FOOD_ANALYSIS_SCHEMA,
            image_data_url=to_data_url(image_bytes),
        )
        return FoodAnalysis.model_validate(raw)


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
