"""Login lifecycle for a user's profile, food log and chat context."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from uuid import uuid4
from zoneinfo import ZoneInfo

from nutrivision.domain.profile import FoodItem, UserProfile, default_profile
from nutrivision.domain.targets import BmiResult, NutritionTargets
from nutrivision.services.chat import ChatSession
from nutrivision.services.targets import compute_bmi, compute_targets, goal_for_bmi
from nutrivision.services.user_data import UserDataRepository, reconcile_profile

DEFAULT_DISPLAY_NAME = "User"
SESSION_IDLE_TIMEOUT = timedelta(days=7)
EDITABLE_PROFILE_FIELDS = frozenset(
    {"name", "gender", "age", "weight", "height", "goal", "activity_level"}
)

_logger = logging.getLogger(__name__)


class NotAuthenticatedError(RuntimeError):
    """Raised when a mutation is attempted without a logged-in identity."""


def local_clock(timezone: str | None = None) -> Callable[[], datetime]:
    """Return a clock producing aware datetimes in the given or host zone."""
    if timezone:
        zone = ZoneInfo(timezone)
        return lambda: datetime.now(tz=zone)
    return lambda: datetime.now().astimezone()


@dataclass
class UserSession:
    """State machine owning one identity's in-memory profile and log.

    Storage is a write-through mirror: every mutation while authenticated is
    saved under the identity's own keys, and nothing is saved while logged out.
    """

    repository: UserDataRepository
    clock: Callable[[], datetime]
    identity: str | None = None
    profile: UserProfile = field(init=False)
    food_log: list[FoodItem] = field(default_factory=list)
    chat: ChatSession | None = None

    def __post_init__(self) -> None:
        self.profile = default_profile(DEFAULT_DISPLAY_NAME, self.clock())

    @property
    def is_authenticated(self) -> bool:
        """Return True while an identity is logged in."""
        return self.identity is not None

    def login(self, identity: str, display_name: str) -> UserProfile:
        """Load or create the identity's data and start a fresh chat context."""
        if self.is_authenticated:
            self.logout()
        now = self.clock()
        defaults = default_profile(display_name, now)
        returning = self.repository.has_profile(identity)
        stored = self.repository.load_profile(identity)
        if stored is None:
            profile = defaults
        else:
            profile = replace(reconcile_profile(stored, defaults), name=display_name)
        # An unreadable profile still marks a returning identity.
        food_log: list[FoodItem] = []
        if returning:
            food_log = self.repository.load_log(identity) or []

        if not _is_recent(profile.last_active_date, now):
            profile = replace(profile, streak=0)
        profile = replace(profile, last_active_date=now)

        self.identity = identity
        self.profile = profile
        self.food_log = food_log
        self.chat = ChatSession(identity=identity)
        self.repository.save_profile(identity, profile)
        self.repository.save_log(identity, food_log)
        _logger.info(
            "Logged in %s (new=%s, streak=%s)", identity, not returning, profile.streak
        )
        return profile

    def logout(self) -> None:
        """Reset in-memory state; persisted data is left untouched."""
        if self.identity is not None:
            _logger.info("Logged out %s", self.identity)
        self.identity = None
        self.profile = default_profile(DEFAULT_DISPLAY_NAME, self.clock())
        self.food_log = []
        self.chat = None

    def add_food(self, item: FoodItem) -> None:
        """Prepend a confirmed food item to the log."""
        identity = self._require_identity()
        self.food_log = [item, *self.food_log]
        self.repository.save_log(identity, self.food_log)

    def update_profile(self, **changes: object) -> UserProfile:
        """Replace editable biometric fields; values are not validated."""
        unknown = set(changes) - EDITABLE_PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Profile fields not editable: {sorted(unknown)}")
        return self._set_profile(replace(self.profile, **changes))

    def record_challenge_result(self, points_earned: int) -> UserProfile:
        """Add points, extend the streak and stamp today's quiz date.

        Once-per-day gating is left to the caller.
        """
        now = self.clock()
        return self._set_profile(
            replace(
                self.profile,
                points=self.profile.points + points_earned,
                streak=self.profile.streak + 1,
                last_quiz_date=now,
            )
        )

    def set_subscription(
        self, tier: str, expiry: datetime | None = None
    ) -> UserProfile:
        """Switch the subscription tier."""
        return self._set_profile(
            replace(self.profile, subscription=tier, subscription_expiry=expiry)
        )

    def auto_select_goal(self) -> BmiResult:
        """Set the goal from the profile's BMI and return the BMI result."""
        result = self.bmi()
        self._set_profile(replace(self.profile, goal=goal_for_bmi(result.bmi)))
        return result

    def has_completed_challenge_today(self) -> bool:
        """Return True when the last quiz falls on today's calendar date."""
        last_quiz = self.profile.last_quiz_date
        if last_quiz is None:
            return False
        now = self.clock()
        return _calendar_date(last_quiz, now) == now.date()

    def targets(self) -> NutritionTargets:
        """Return daily targets for the current profile."""
        return compute_targets(self.profile)

    def bmi(self) -> BmiResult:
        """Return BMI for the current profile."""
        return compute_bmi(self.profile.weight, self.profile.height)

    def _set_profile(self, profile: UserProfile) -> UserProfile:
        identity = self._require_identity()
        self.profile = profile
        self.repository.save_profile(identity, profile)
        return profile

    def _require_identity(self) -> str:
        if self.identity is None:
            raise NotAuthenticatedError("No user is logged in")
        return self.identity


@dataclass
class SessionService:
    """Registry of live sessions keyed by opaque tokens.

    Sessions unused for longer than ``idle_timeout`` are dropped; idle
    sessions are swept on every login.
    """

    repository: UserDataRepository
    clock: Callable[[], datetime]
    idle_timeout: timedelta = SESSION_IDLE_TIMEOUT
    _sessions: dict[str, UserSession] = field(default_factory=dict)
    _last_seen: dict[str, datetime] = field(default_factory=dict)

    def __contains__(self, token: object) -> bool:
        return token in self._sessions

    def login(self, identity: str, display_name: str) -> tuple[str, UserSession]:
        """Log an identity in and return a new session token."""
        now = self.clock()
        self.expire_idle(now)
        session = UserSession(repository=self.repository, clock=self.clock)
        session.login(identity, display_name)
        token = uuid4().hex
        self._sessions[token] = session
        self._last_seen[token] = now
        return token, session

    def get(self, token: str) -> UserSession | None:
        """Return the live session for a token, if any, and mark it used."""
        session = self._sessions.get(token)
        if session is None:
            return None
        now = self.clock()
        if now - self._last_seen[token] > self.idle_timeout:
            self._end(token)
            return None
        self._last_seen[token] = now
        return session

    def logout(self, token: str) -> bool:
        """End a session; returns False for unknown tokens."""
        if token not in self._sessions:
            return False
        self._end(token)
        return True

    def expire_idle(self, now: datetime | None = None) -> list[str]:
        """Drop sessions idle past the timeout and return their tokens."""
        now = now or self.clock()
        expired = [
            token
            for token, last_seen in self._last_seen.items()
            if now - last_seen > self.idle_timeout
        ]
        for token in expired:
            self._end(token)
        if expired:
            _logger.info("Expired %s idle sessions", len(expired))
        return expired

    def _end(self, token: str) -> None:
        session = self._sessions.pop(token)
        self._last_seen.pop(token, None)
        session.logout()


def _is_recent(last_active: datetime, now: datetime) -> bool:
    """Return True when last_active falls on today or yesterday."""
    last_day = _calendar_date(last_active, now)
    today = now.date()
    return last_day in {today, today - timedelta(days=1)}


def _calendar_date(value: datetime, now: datetime) -> date:
    """Return the calendar date of value in the zone of now."""
    if value.tzinfo is None or now.tzinfo is None:
        return value.date()
    return value.astimezone(now.tzinfo).date()
