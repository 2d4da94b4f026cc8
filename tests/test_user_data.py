"""Tests for identity-scoped profile and log persistence."""

import json
from dataclasses import replace
from datetime import UTC, datetime

from nutrivision.domain.profile import default_profile
from nutrivision.services.storage import InMemoryKeyValueStore
from nutrivision.services.user_data import (
    PROFILE_SCHEMA_VERSION,
    UserDataRepository,
    log_key,
    profile_key,
    reconcile_profile,
)
from tests.conftest import make_food

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=UTC)


def test_profile_round_trip() -> None:
    repository = UserDataRepository(InMemoryKeyValueStore())
    profile = replace(
        default_profile("Ana", NOW),
        weight=62.5,
        streak=4,
        points=120,
        subscription="pro",
        last_quiz_date=NOW,
    )

    repository.save_profile("ana@example.com", profile)
    stored = repository.load_profile("ana@example.com")

    assert stored is not None
    assert stored["schema_version"] == PROFILE_SCHEMA_VERSION
    assert reconcile_profile(stored, default_profile("x", NOW)) == replace(
        profile, name="Ana"
    )


def test_log_round_trip_preserves_order() -> None:
    repository = UserDataRepository(InMemoryKeyValueStore())
    items = [make_food("soup", 200, NOW), make_food("bread", 90, NOW)]

    repository.save_log("ana@example.com", items)

    assert repository.load_log("ana@example.com") == items


def test_keys_are_scoped_per_identity() -> None:
    store = InMemoryKeyValueStore()
    repository = UserDataRepository(store)

    repository.save_profile("a@x.com", default_profile("A", NOW))
    repository.save_log("a@x.com", [])

    assert sorted(store.keys()) == [log_key("a@x.com"), profile_key("a@x.com")]
    assert repository.load_profile("b@x.com") is None
    assert repository.load_log("b@x.com") is None


def test_corrupt_profile_is_treated_as_absent() -> None:
    store = InMemoryKeyValueStore()
    store.set(profile_key("a@x.com"), "{not json")
    repository = UserDataRepository(store)

    assert repository.load_profile("a@x.com") is None


def test_non_object_profile_is_treated_as_absent() -> None:
    store = InMemoryKeyValueStore()
    store.set(profile_key("a@x.com"), "[1, 2]")

    assert UserDataRepository(store).load_profile("a@x.com") is None


def test_corrupt_log_is_treated_as_absent() -> None:
    store = InMemoryKeyValueStore()
    store.set(log_key("a@x.com"), json.dumps([{"id": "1", "name": "x"}]))

    assert UserDataRepository(store).load_log("a@x.com") is None


def test_reconcile_fills_missing_fields_from_defaults() -> None:
    defaults = default_profile("Ana", NOW)

    profile = reconcile_profile({"schema_version": 1, "weight": 68}, defaults)

    assert profile.weight == 68
    assert profile.height == defaults.height
    assert profile.subscription == "free"
    assert profile.last_active_date == NOW


def test_reconcile_ignores_mistyped_fields() -> None:
    defaults = default_profile("Ana", NOW)

    profile = reconcile_profile(
        {
            "schema_version": 1,
            "age": "thirty",
            "streak": True,
            "goal": 3,
            "last_active_date": "yesterday",
        },
        defaults,
    )

    assert profile.age == defaults.age
    assert profile.streak == 0
    assert profile.goal == defaults.goal
    assert profile.last_active_date == NOW


def test_reconcile_maps_legacy_field_names() -> None:
    legacy = {
        "name": "Old",
        "gender": "female",
        "age": 35,
        "weight": 58,
        "height": 160,
        "goal": "weight_loss",
        "activityLevel": "light",
        "streak": 3,
        "lastActiveDate": "2024-05-14T18:00:00.000Z",
        "lastQuizDate": "2024-05-14T18:05:00.000Z",
        "points": 70,
        "subscription": "elite",
    }

    profile = reconcile_profile(legacy, default_profile("New", NOW))

    assert profile.activity_level == "light"
    assert profile.last_active_date == datetime(2024, 5, 14, 18, 0, tzinfo=UTC)
    assert profile.last_quiz_date == datetime(2024, 5, 14, 18, 5, tzinfo=UTC)
    assert profile.points == 70
    assert profile.subscription == "elite"


def test_legacy_log_entries_are_parsed() -> None:
    store = InMemoryKeyValueStore()
    store.set(
        log_key("a@x.com"),
        json.dumps(
            [
                {
                    "id": "abc",
                    "name": "Pasta",
                    "calories": 600,
                    "protein": 20,
                    "carbs": 90,
                    "fats": 15,
                    "portionSize": "1 plate",
                    "imageUrl": "data:image/jpeg;base64,AAAA",
                    "confidence": 0.7,
                    "timestamp": "2024-05-14T12:00:00.000Z",
                }
            ]
        ),
    )

    log = UserDataRepository(store).load_log("a@x.com")

    assert log is not None
    assert log[0].portion_size == "1 plate"
    assert log[0].image_ref == "data:image/jpeg;base64,AAAA"
    assert log[0].created_at == datetime(2024, 5, 14, 12, 0, tzinfo=UTC)
