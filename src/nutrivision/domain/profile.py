"""Domain models for user profiles and food logs."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserProfile:
    """Biometric profile and engagement counters for one identity."""

    name: str
    gender: str
    age: float
    weight: float
    height: float
    goal: str
    activity_level: str
    streak: int
    last_active_date: datetime
    points: int
    subscription: str
    last_quiz_date: datetime | None = None
    subscription_expiry: datetime | None = None


@dataclass(frozen=True)
class FoodItem:
    """Logged food entry created from a confirmed image analysis."""

    id: str
    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    created_at: datetime
    portion_size: str | None = None
    image_ref: str | None = None
    confidence: float | None = None


def default_profile(name: str, now: datetime) -> UserProfile:
    """Return the baseline profile used for new and logged-out sessions."""
    return UserProfile(
        name=name,
        gender="male",
        age=28,
        weight=75,
        height=180,
        goal="muscle_gain",
        activity_level="active",
        streak=0,
        last_active_date=now,
        points=0,
        subscription="free",
    )
