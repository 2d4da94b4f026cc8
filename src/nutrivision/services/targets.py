"""Nutrition target and BMI calculations."""

import math
from collections.abc import Iterable

from nutrivision.domain.profile import FoodItem, UserProfile
from nutrivision.domain.targets import BmiResult, DailyTotals, NutritionTargets

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "athlete": 1.9,
}
_DEFAULT_MULTIPLIER = 1.2
_GOAL_ADJUSTMENTS = {
    "weight_loss": -500,
    "muscle_gain": 400,
}
MIN_CALORIES = 1200

_PROTEIN_G_PER_KG = 2
_FAT_G_PER_KG = 0.9
_KCAL_PER_G_PROTEIN = 4
_KCAL_PER_G_CARBS = 4
_KCAL_PER_G_FAT = 9


def basal_metabolic_rate(profile: UserProfile) -> float:
    """Estimate resting energy expenditure with Mifflin-St Jeor."""
    offset = 5 if profile.gender == "male" else -161
    return 10 * profile.weight + 6.25 * profile.height - 5 * profile.age + offset


def total_daily_energy_expenditure(profile: UserProfile) -> float:
    """Scale BMR by the activity multiplier; unknown levels use sedentary."""
    multiplier = ACTIVITY_MULTIPLIERS.get(profile.activity_level, _DEFAULT_MULTIPLIER)
    return basal_metabolic_rate(profile) * multiplier


def compute_targets(profile: UserProfile) -> NutritionTargets:
    """Return daily calorie and macronutrient targets for a profile."""
    tdee = total_daily_energy_expenditure(profile)
    calories = max(tdee + _GOAL_ADJUSTMENTS.get(profile.goal, 0), MIN_CALORIES)
    protein = profile.weight * _PROTEIN_G_PER_KG
    fats = profile.weight * _FAT_G_PER_KG
    remaining = calories - protein * _KCAL_PER_G_PROTEIN - fats * _KCAL_PER_G_FAT
    carbs = max(0.0, remaining / _KCAL_PER_G_CARBS)
    return NutritionTargets(
        calories=_round_half_up(calories),
        protein=_round_half_up(protein),
        carbs=_round_half_up(carbs),
        fats=_round_half_up(fats),
    )


def compute_bmi(weight: float, height: float) -> BmiResult:
    """Return BMI rounded to one decimal with its display status.

    Zero height yields a non-finite value rather than an error; such values
    fall through to the last bucket.
    """
    height_m = height / 100
    if height_m == 0:
        bmi = math.nan if weight == 0 else math.copysign(math.inf, weight)
    else:
        bmi = _round_half_up(weight / (height_m * height_m) * 10) / 10
    return BmiResult(bmi=bmi, status=bmi_status(bmi))


def bmi_status(bmi: float) -> str:
    """Classify a BMI value using the standard display thresholds."""
    if bmi < 18.5:
        return "underweight"
    if 18.5 <= bmi < 25:
        return "normal"
    if 25 <= bmi < 30:
        return "overweight"
    return "obese"


def goal_for_bmi(bmi: float) -> str:
    """Pick a plan goal from BMI.

    Uses its own 18/20 thresholds, separate from ``bmi_status``.
    """
    if bmi < 18:
        return "muscle_gain"
    if bmi > 20:
        return "weight_loss"
    return "maintenance"


def summarize_log(items: Iterable[FoodItem]) -> DailyTotals:
    """Sum nutrients across logged food items."""
    calories = protein = carbs = fats = 0.0
    for item in items:
        calories += item.calories
        protein += item.protein
        carbs += item.carbs
        fats += item.fats
    return DailyTotals(calories=calories, protein=protein, carbs=carbs, fats=fats)


def remaining_targets(targets: NutritionTargets, totals: DailyTotals) -> DailyTotals:
    """Return how much of each target is left after the logged totals."""
    return DailyTotals(
        calories=targets.calories - totals.calories,
        protein=targets.protein - totals.protein,
        carbs=targets.carbs - totals.carbs,
        fats=targets.fats - totals.fats,
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
