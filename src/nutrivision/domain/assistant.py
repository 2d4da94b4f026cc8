"""Models for structured generative-AI results."""

from pydantic import BaseModel, Field


class FoodAnalysis(BaseModel):
    """Nutrition estimate for the dish visible in an image."""

    name: str
    portion_size: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    calories: float
    protein: float
    carbs: float
    fats: float
    analysis: str | None = None


class Nutrients(BaseModel):
    """Macronutrients for a planned meal."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0


class MealPlanItem(BaseModel):
    """Single meal within a daily plan."""

    meal_type: str
    name: str
    description: str
    nutrients: Nutrients


class DailyPlan(BaseModel):
    """Meals for one day of the week."""

    day: str
    meals: list[MealPlanItem]


class WeeklyPlan(BaseModel):
    """Seven-day meal plan."""

    week: list[DailyPlan] = Field(default_factory=list)


class QuizQuestion(BaseModel):
    """Multiple-choice nutrition question."""

    id: str
    question: str
    options: list[str]
    correct_answer: int
    explanation: str
