"""Endpoints backed by the generative-AI collaborators."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nutrivision.api.auth import profile_payload, require_session, require_token
from nutrivision.api.models import (
    AnalyzeImageRequest,
    ChallengeAnswer,
    ChatRequest,
    LogFoodRequest,
)
from nutrivision.domain.profile import FoodItem
from nutrivision.services.challenge import points_for_answer
from nutrivision.services.planner import MissingBiometricsError
from nutrivision.services.sessions import UserSession
from nutrivision.services.user_data import serialize_food_item

if TYPE_CHECKING:
    from nutrivision.containers import AppContainer

router = APIRouter(tags=["assistant"])
_logger = logging.getLogger(__name__)


@router.post("/scanner/analyze")
async def analyze_image(
    payload: AnalyzeImageRequest,
    request: Request,
    session: UserSession = Depends(require_session),
) -> dict:
    """Estimate nutrition for an uploaded food photo."""
    container: AppContainer = request.app.state.container
    image_bytes = _decode_image(payload.image_base64)
    try:
        analysis = await container.vision_service.analyze(image_bytes)
    except Exception as exc:
        _logger.exception("Food analysis failed", extra={"identity": session.identity})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=_error_detail(
                container, exc, "Failed to analyze image. Please try again."
            ),
        ) from exc
    return analysis.model_dump()


@router.post("/log", status_code=status.HTTP_201_CREATED)
async def log_food(
    payload: LogFoodRequest,
    request: Request,
    session: UserSession = Depends(require_session),
) -> dict:
    """Add a confirmed analysis result to the food log."""
    container: AppContainer = request.app.state.container
    item = FoodItem(
        id=str(uuid4()),
        name=payload.name,
        calories=payload.calories,
        protein=payload.protein,
        carbs=payload.carbs,
        fats=payload.fats,
        created_at=container.session_service.clock(),
        portion_size=payload.portion_size,
        image_ref=payload.image_ref,
        confidence=payload.confidence,
    )
    session.add_food(item)
    return serialize_food_item(item)


@router.post("/planner/weekly")
async def weekly_plan(
    request: Request, session: UserSession = Depends(require_session)
) -> dict:
    """Generate a seven-day meal plan for the current profile."""
    container: AppContainer = request.app.state.container
    try:
        plan = await container.meal_plan_service.generate_weekly_plan(session.profile)
    except MissingBiometricsError as exc:
        raise HTTPException(
            status_code=422, detail="Enter your weight and height first."
        ) from exc
    except Exception as exc:
        _logger.exception("Meal plan generation failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=_error_detail(container, exc, "Could not generate plan."),
        ) from exc
    return plan.model_dump()


@router.get("/challenge")
async def get_challenge(
    request: Request,
    token: str = Depends(require_token),
    session: UserSession = Depends(require_session),
) -> dict:
    """Return today's quiz, or the completed state once answered today."""
    if session.has_completed_challenge_today():
        return _completed_payload(session)
    container: AppContainer = request.app.state.container
    quiz = await container.quiz_service.generate_daily_quiz()
    request.app.state.pending_quizzes[token] = quiz
    return {
        "completed": False,
        "quiz": {"id": quiz.id, "question": quiz.question, "options": quiz.options},
        "streak": session.profile.streak,
        "points": session.profile.points,
    }


@router.post("/challenge/answer")
async def answer_challenge(
    payload: ChallengeAnswer,
    request: Request,
    token: str = Depends(require_token),
    session: UserSession = Depends(require_session),
) -> dict:
    """Score the answer and award points once per calendar day."""
    if session.has_completed_challenge_today():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Challenge already completed today. Come back tomorrow!",
        )
    quiz = request.app.state.pending_quizzes.pop(token, None)
    if quiz is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="No active challenge."
        )
    points = points_for_answer(quiz, payload.option_index)
    profile = session.record_challenge_result(points)
    return {
        "correct": payload.option_index == quiz.correct_answer,
        "correct_answer": quiz.correct_answer,
        "explanation": quiz.explanation,
        "points_earned": points,
        "profile": profile_payload(profile),
    }


@router.post("/chat")
async def chat(
    payload: ChatRequest,
    request: Request,
    session: UserSession = Depends(require_session),
) -> dict[str, str]:
    """Send a message to the nutrition assistant."""
    container: AppContainer = request.app.state.container
    reply = await container.chat_service.send(
        session.chat, payload.message, session.profile
    )
    return {"reply": reply}


def _decode_image(raw: str) -> bytes:
    """Decode base64 image data, accepting data URLs."""
    _, _, encoded = raw.rpartition(",")
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise HTTPException(status_code=422, detail="Invalid image data.") from exc


def _completed_payload(session: UserSession) -> dict:
    return {
        "completed": True,
        "streak": session.profile.streak,
        "points": session.profile.points,
    }


def _error_detail(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
