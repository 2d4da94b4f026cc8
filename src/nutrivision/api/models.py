"""Pydantic models for API request payloads."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials are accepted as given."""

    email: str
    name: str
    password: str | None = None


class ProfileUpdate(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""

    name: str | None = None
    gender: Literal["male", "female"] | None = None
    age: float | None = None
    weight: float | None = None
    height: float | None = None
    goal: Literal["weight_loss", "maintenance", "muscle_gain"] | None = None
    activity_level: (
        Literal["sedentary", "light", "moderate", "active", "athlete"] | None
    ) = None


class AnalyzeImageRequest(BaseModel):
    """Base64-encoded image, optionally as a data URL."""

    image_base64: str


class LogFoodRequest(BaseModel):
    """Confirmed analysis result to add to the food log."""

    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    portion_size: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    image_ref: str | None = None


class ChallengeAnswer(BaseModel):
    """Selected option for the daily challenge."""

    option_index: int = Field(ge=0)


class SubscriptionUpdate(BaseModel):
    """Requested subscription tier."""

    tier: Literal["free", "pro", "elite"]
    expiry: datetime | None = None


class ChatRequest(BaseModel):
    """User message for the chat assistant."""

    message: str = Field(min_length=1)
