"""Derived nutrition metrics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionTargets:
    """Daily nutrition targets in kcal and grams."""

    calories: int
    protein: int
    carbs: int
    fats: int


@dataclass(frozen=True)
class BmiResult:
    """Body mass index with its display classification."""

    bmi: float
    status: str


@dataclass(frozen=True)
class DailyTotals:
    """Summed nutrients for the current food log."""

    calories: float
    protein: float
    carbs: float
    fats: float
