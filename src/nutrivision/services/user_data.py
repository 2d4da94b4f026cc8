"""Identity-scoped persistence for profiles and food logs."""

import json
import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import datetime

from nutrivision.domain.profile import FoodItem, UserProfile
from nutrivision.services.storage import KeyValueStore

PROFILE_SCHEMA_VERSION = 1

# Field names used by records written before schema versioning.
_LEGACY_PROFILE_KEYS = {
    "activityLevel": "activity_level",
    "lastActiveDate": "last_active_date",
    "lastQuizDate": "last_quiz_date",
    "subscriptionExpiry": "subscription_expiry",
}
_LEGACY_FOOD_KEYS = {
    "portionSize": "portion_size",
    "imageUrl": "image_ref",
    "timestamp": "created_at",
}

_logger = logging.getLogger(__name__)


def profile_key(identity: str) -> str:
    """Return the storage key for an identity's profile."""
    return f"profile:{identity}"


def log_key(identity: str) -> str:
    """Return the storage key for an identity's food log."""
    return f"log:{identity}"


@dataclass
class UserDataRepository:
    """Reads and writes one identity's profile and log through a key-value store."""

    store: KeyValueStore

    def has_profile(self, identity: str) -> bool:
        """Return True when a profile was ever saved, even if now unreadable."""
        return self.store.get(profile_key(identity)) is not None

    def load_profile(self, identity: str) -> dict[str, object] | None:
        """Return the stored profile fields, or None when absent or unreadable."""
        raw = self.store.get(profile_key(identity))
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
        except ValueError:
            _logger.warning("Discarding unreadable profile for %s", identity)
            return None
        if not isinstance(payload, dict):
            _logger.warning("Discarding malformed profile for %s", identity)
            return None
        return payload

    def save_profile(self, identity: str, profile: UserProfile) -> None:
        """Persist a profile under the identity's key."""
        self.store.set(profile_key(identity), json.dumps(serialize_profile(profile)))

    def load_log(self, identity: str) -> list[FoodItem] | None:
        """Return the stored food log, or None when absent or unreadable."""
        raw = self.store.get(log_key(identity))
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            return parse_food_log(payload)
        except (ValueError, TypeError, KeyError):
            _logger.warning("Discarding unreadable food log for %s", identity)
            return None

    def save_log(self, identity: str, items: list[FoodItem]) -> None:
        """Persist the food log under the identity's key."""
        payload = [serialize_food_item(item) for item in items]
        self.store.set(log_key(identity), json.dumps(payload))


def serialize_profile(profile: UserProfile) -> dict[str, object]:
    """Convert a profile into a JSON-compatible mapping."""
    payload = _jsonable(asdict(profile))
    payload["schema_version"] = PROFILE_SCHEMA_VERSION
    return payload


def serialize_food_item(item: FoodItem) -> dict[str, object]:
    """Convert a food item into a JSON-compatible mapping."""
    return _jsonable(asdict(item))


def reconcile_profile(raw: Mapping[str, object], defaults: UserProfile) -> UserProfile:
    """Build a profile from stored fields, filling gaps from defaults.

    Each field is taken from ``raw`` when present with a usable type and from
    ``defaults`` otherwise. Unversioned records use the legacy field names.
    """
    version = raw.get("schema_version")
    if version is None:
        fields = {_LEGACY_PROFILE_KEYS.get(key, key): value for key, value in raw.items()}
    else:
        fields = dict(raw)
        if isinstance(version, int) and version > PROFILE_SCHEMA_VERSION:
            _logger.warning(
                "Profile schema_version=%s is newer than %s; unknown fields ignored",
                version,
                PROFILE_SCHEMA_VERSION,
            )
    return UserProfile(
        name=_text(fields, "name", defaults.name),
        gender=_text(fields, "gender", defaults.gender),
        age=_number(fields, "age", defaults.age),
        weight=_number(fields, "weight", defaults.weight),
        height=_number(fields, "height", defaults.height),
        goal=_text(fields, "goal", defaults.goal),
        activity_level=_text(fields, "activity_level", defaults.activity_level),
        streak=_count(fields, "streak", defaults.streak),
        last_active_date=(
            _timestamp(fields, "last_active_date") or defaults.last_active_date
        ),
        points=_count(fields, "points", defaults.points),
        subscription=_text(fields, "subscription", defaults.subscription),
        last_quiz_date=_timestamp(fields, "last_quiz_date") or defaults.last_quiz_date,
        subscription_expiry=(
            _timestamp(fields, "subscription_expiry") or defaults.subscription_expiry
        ),
    )


def parse_food_log(payload: object) -> list[FoodItem]:
    """Parse a stored food log, raising ValueError on malformed data."""
    if not isinstance(payload, list):
        raise ValueError("food log must be a list")
    items = []
    for entry in payload:
        if not isinstance(entry, dict):
            raise ValueError("food log entries must be objects")
        fields = {_LEGACY_FOOD_KEYS.get(key, key): value for key, value in entry.items()}
        created_at = _timestamp(fields, "created_at")
        if created_at is None:
            raise ValueError("food log entry is missing created_at")
        confidence = fields.get("confidence")
        items.append(
            FoodItem(
                id=str(fields["id"]),
                name=str(fields["name"]),
                calories=float(fields["calories"]),
                protein=float(fields["protein"]),
                carbs=float(fields["carbs"]),
                fats=float(fields["fats"]),
                created_at=created_at,
                portion_size=_optional_text(fields.get("portion_size")),
                image_ref=_optional_text(fields.get("image_ref")),
                confidence=float(confidence) if confidence is not None else None,
            )
        )
    return items


def _jsonable(payload: dict[str, object]) -> dict[str, object]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in payload.items()
    }


def _text(fields: Mapping[str, object], key: str, default: str) -> str:
    value = fields.get(key)
    return value if isinstance(value, str) else default


def _optional_text(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _number(fields: Mapping[str, object], key: str, default: float) -> float:
    value = fields.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return value


def _count(fields: Mapping[str, object], key: str, default: int) -> int:
    value = fields.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return int(value)


def _timestamp(fields: Mapping[str, object], key: str) -> datetime | None:
    value = fields.get(key)
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
