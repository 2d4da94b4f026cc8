"""Personalized weekly meal plan generation."""

from dataclasses import dataclass

from nutrivision.domain.assistant import WeeklyPlan
from nutrivision.domain.profile import UserProfile
from nutrivision.services.assistant import AssistantClient
from nutrivision.services.targets import compute_bmi

_NUTRIENTS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number"},
        "protein": {"type": "number"},
        "carbs": {"type": "number"},
        "fats": {"type": "number"},
    },
    "required": ["calories", "protein", "carbs", "fats"],
    "additionalProperties": False,
}

WEEKLY_PLAN_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "week": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "day": {"type": "string"},
                    "meals": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "meal_type": {
                                    "type": "string",
                                    "enum": ["Breakfast", "Lunch", "Dinner", "Snack"],
                                },
                                "name": {"type": "string"},
                                "description": {"type": "string"},
                                "nutrients": _NUTRIENTS_SCHEMA,
                            },
                            "required": ["meal_type", "name", "description", "nutrients"],
                            "additionalProperties": False,
                        },
                    },
                },
                "required": ["day", "meals"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["week"],
    "additionalProperties": False,
}


class MissingBiometricsError(ValueError):
    """Raised when a profile lacks the weight or height a plan needs."""


@dataclass
class MealPlanService:
    """Service that builds meal plan prompts and validates results."""

    client: AssistantClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def generate_weekly_plan(self, profile: UserProfile) -> WeeklyPlan:
        """Generate a seven-day plan tailored to the profile."""
        if not has_biometrics(profile):
            raise MissingBiometricsError("weight and height are required")
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=build_plan_prompt(profile),
            schema_name="weekly_plan",
            schema=WEEKLY_PLAN_SCHEMA,
        )
        if not raw.get("week"):
            return WeeklyPlan()
        return WeeklyPlan.model_validate(raw)


def has_biometrics(profile: UserProfile) -> bool:
    """Return True when weight and height are usable for BMI."""
    return profile.weight > 0 and profile.height > 0


def build_plan_prompt(profile: UserProfile) -> str:
    """Describe the user's biometrics and planning rules for the model."""
    bmi = compute_bmi(profile.weight, profile.height).bmi
    return (
        "You are an expert nutritionist AI. Generate a highly personalized "
        "7-day meal plan (Monday to Sunday) for a user with these biometrics:\n"
        f"- Age: {profile.age:g}\n"
        f"- Height: {profile.height:g} cm\n"
        f"- Weight: {profile.weight:g} kg\n"
        f"- Activity Level: {profile.activity_level}\n"
        f"- Calculated BMI: {bmi:.1f}\n"
        f"- Stated Goal: {profile.goal}\n\n"
        "Planning rules:\n"
        "1. If BMI < 18: create a caloric surplus plan focused on muscle gain "
        "and recovery. High protein, complex carbs.\n"
        "2. If BMI > 20: create a caloric deficit plan. High protein, high "
        "volume vegetables, controlled fats and carbs.\n"
        "3. Otherwise: focus on maintenance and healthy habits.\n\n"
        "Provide exactly 7 days, each with Breakfast, Lunch, Dinner and Snack. "
        "Keep calories, protein, carbs and fats accurate and aligned with the "
        "goal, and vary the meals across the week."
    )
