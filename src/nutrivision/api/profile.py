"""Profile, targets and dashboard endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from nutrivision.api.auth import profile_payload, require_session
from nutrivision.api.models import ProfileUpdate, SubscriptionUpdate
from nutrivision.services.planner import has_biometrics
from nutrivision.services.sessions import UserSession
from nutrivision.services.targets import remaining_targets, summarize_log
from nutrivision.services.user_data import serialize_food_item

router = APIRouter(tags=["profile"])


@router.get("/profile")
async def get_profile(session: UserSession = Depends(require_session)) -> dict:
    """Return the logged-in user's profile."""
    return profile_payload(session.profile)


@router.patch("/profile")
async def update_profile(
    payload: ProfileUpdate, session: UserSession = Depends(require_session)
) -> dict:
    """Apply profile edits and return the updated profile with targets."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    profile = session.update_profile(**changes)
    return {
        "profile": profile_payload(profile),
        "targets": asdict(session.targets()),
    }


@router.get("/targets")
async def get_targets(session: UserSession = Depends(require_session)) -> dict:
    """Return daily calorie and macro targets."""
    return asdict(session.targets())


@router.get("/bmi")
async def get_bmi(session: UserSession = Depends(require_session)) -> dict:
    """Return BMI and its classification."""
    _require_biometrics(session)
    return asdict(session.bmi())


@router.post("/bmi/auto-goal")
async def auto_goal(session: UserSession = Depends(require_session)) -> dict:
    """Pick the plan goal from BMI and store it."""
    _require_biometrics(session)
    result = session.auto_select_goal()
    return {"bmi": result.bmi, "goal": session.profile.goal}


@router.get("/log")
async def get_log(session: UserSession = Depends(require_session)) -> dict:
    """Return the food log, newest first."""
    return {"items": [serialize_food_item(item) for item in session.food_log]}


@router.get("/dashboard")
async def dashboard(session: UserSession = Depends(require_session)) -> dict:
    """Return logged totals against targets together with engagement counters."""
    targets = session.targets()
    totals = summarize_log(session.food_log)
    return {
        "name": session.profile.name,
        "targets": asdict(targets),
        "totals": asdict(totals),
        "remaining": asdict(remaining_targets(targets, totals)),
        "items": [serialize_food_item(item) for item in session.food_log],
        "streak": session.profile.streak,
        "points": session.profile.points,
        "challenge_completed_today": session.has_completed_challenge_today(),
        "subscription": session.profile.subscription,
    }


@router.put("/subscription")
async def update_subscription(
    payload: SubscriptionUpdate, session: UserSession = Depends(require_session)
) -> dict:
    """Switch subscription tier. No payment is processed."""
    profile = session.set_subscription(payload.tier, payload.expiry)
    return profile_payload(profile)


def _require_biometrics(session: UserSession) -> None:
    if not has_biometrics(session.profile):
        raise HTTPException(
            status_code=422,
            detail="Enter your weight and height first.",
        )
