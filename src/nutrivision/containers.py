"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from nutrivision.adapters.openai_assistant_client import OpenAIAssistantClient
from nutrivision.adapters.supabase_key_value_store import SupabaseKeyValueStore
from nutrivision.config import Settings, parse_storage_backend
from nutrivision.services.challenge import QuizService
from nutrivision.services.chat import ChatService
from nutrivision.services.planner import MealPlanService
from nutrivision.services.sessions import SessionService, local_clock
from nutrivision.services.storage import InMemoryKeyValueStore, KeyValueStore
from nutrivision.services.user_data import UserDataRepository
from nutrivision.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    session_service: SessionService
    vision_service: VisionService
    meal_plan_service: MealPlanService
    quiz_service: QuizService
    chat_service: ChatService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Create the configured key-value store."""
    if parse_storage_backend(settings.storage_backend) == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage requires SUPABASE_URL and key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    return InMemoryKeyValueStore()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    clock = local_clock(resolved_settings.timezone)
    session_service = SessionService(
        repository=UserDataRepository(store),
        clock=clock,
        idle_timeout=timedelta(hours=resolved_settings.session_idle_hours),
    )
    assistant_client = OpenAIAssistantClient.create(resolved_settings.openai_api_key)
    vision_service = VisionService(
        client=assistant_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    meal_plan_service = MealPlanService(
        client=assistant_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    quiz_service = QuizService(
        client=assistant_client,
        model=resolved_settings.openai_model,
        reasoning_effort=None,
        store=resolved_settings.openai_store,
    )
    chat_service = ChatService(
        client=assistant_client,
        model=resolved_settings.openai_chat_model,
        clock=clock,
    )

    async def close_resources() -> None:
        await assistant_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        session_service=session_service,
        vision_service=vision_service,
        meal_plan_service=meal_plan_service,
        quiz_service=quiz_service,
        chat_service=chat_service,
        close_resources=close_resources,
    )
