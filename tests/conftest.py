"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from nutrivision.config import Settings
from nutrivision.containers import AppContainer
from nutrivision.domain.chat import ChatMessage
from nutrivision.domain.profile import FoodItem
from nutrivision.services.assistant import AssistantClient
from nutrivision.services.challenge import QuizService
from nutrivision.services.chat import ChatService
from nutrivision.services.planner import MealPlanService
from nutrivision.services.sessions import SessionService, UserSession
from nutrivision.services.storage import InMemoryKeyValueStore
from nutrivision.services.user_data import UserDataRepository
from nutrivision.services.vision import VisionService

ZONE = ZoneInfo("Europe/Paris")


@dataclass
class FixedClock:
    """Clock returning a controllable time."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 5, 15, 9, 30, tzinfo=ZONE)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def weekly_plan_payload() -> dict[str, object]:
    days = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    return {
        "week": [
            {
                "day": day,
                "meals": [
                    {
                        "meal_type": "Breakfast",
                        "name": "Oatmeal",
                        "description": "Oats with berries",
                        "nutrients": {
                            "calories": 350,
                            "protein": 12,
                            "carbs": 60,
                            "fats": 7,
                        },
                    }
                ],
            }
            for day in days
        ]
    }


@dataclass
class FakeAssistantClient(AssistantClient):
    """Fake assistant returning canned payloads per schema name."""

    payloads: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "food_analysis": {
                "name": "Chicken salad",
                "portion_size": "1 bowl",
                "confidence": 0.9,
                "calories": 420,
                "protein": 35,
                "carbs": 18,
                "fats": 22,
                "analysis": "Grilled chicken over greens",
            },
            "weekly_plan": weekly_plan_payload(),
            "daily_quiz": {
                "question": "Which vitamin does sunlight help the body produce?",
                "options": ["Vitamin A", "Vitamin C", "Vitamin D", "Vitamin K"],
                "correct_answer": 2,
                "explanation": "Skin synthesizes vitamin D under UVB light.",
            },
        }
    )
    reply_text: str = "Aim for lean protein at every meal."
    error: Exception | None = None
    generate_calls: list[dict[str, object]] = field(default_factory=list)
    reply_calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        self.generate_calls.append(
            {
                "model": model,
                "prompt": prompt,
                "schema_name": schema_name,
                "image_data_url": image_data_url,
            }
        )
        if self.error:
            raise self.error
        return self.payloads[schema_name]

    async def reply(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[ChatMessage],
    ) -> str:
        self.reply_calls.append(
            {"model": model, "instructions": instructions, "messages": list(messages)}
        )
        if self.error:
            raise self.error
        return self.reply_text


def make_food(name: str, calories: float, created_at: datetime) -> FoodItem:
    return FoodItem(
        id=f"id-{name}",
        name=name,
        calories=calories,
        protein=10,
        carbs=20,
        fats=5,
        created_at=created_at,
        portion_size="1 plate",
        confidence=0.8,
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(store: InMemoryKeyValueStore) -> UserDataRepository:
    return UserDataRepository(store)


@pytest.fixture
def session(repository: UserDataRepository, clock: FixedClock) -> UserSession:
    return UserSession(repository=repository, clock=clock)


@pytest.fixture
def assistant_client() -> FakeAssistantClient:
    return FakeAssistantClient()


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueStore,
    repository: UserDataRepository,
    clock: FixedClock,
    assistant_client: FakeAssistantClient,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        session_service=SessionService(repository=repository, clock=clock),
        vision_service=VisionService(
            client=assistant_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        meal_plan_service=MealPlanService(
            client=assistant_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        quiz_service=QuizService(
            client=assistant_client,
            model=settings.openai_model,
            reasoning_effort=None,
            store=settings.openai_store,
        ),
        chat_service=ChatService(
            client=assistant_client,
            model=settings.openai_chat_model,
            clock=clock,
        ),
        close_resources=close_resources,
    )
