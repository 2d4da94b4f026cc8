"""Tests for the chat assistant."""

import asyncio
from datetime import UTC, datetime

from nutrivision.domain.profile import default_profile
from nutrivision.services.chat import (
    CONNECTION_ERROR_REPLY,
    EMPTY_REPLY,
    ChatService,
    ChatSession,
)
from tests.conftest import FakeAssistantClient

NOW = datetime(2024, 5, 15, tzinfo=UTC)


def _service(client: FakeAssistantClient) -> ChatService:
    return ChatService(client=client, model="gpt-5.2", clock=lambda: NOW)


def test_send_builds_instructions_once_and_keeps_history() -> None:
    client = FakeAssistantClient()
    service = _service(client)
    session = ChatSession(identity="a@x.com")
    profile = default_profile("Ana", NOW)

    first = asyncio.run(service.send(session, "What should I eat?", profile))
    asyncio.run(service.send(session, "And after training?", profile))

    assert first == client.reply_text
    assert "The user is Ana" in str(session.instructions)
    assert "Calculated BMI: 23.1" in str(session.instructions)
    assert [message.role for message in session.history] == [
        "user",
        "model",
        "user",
        "model",
    ]
    assert len(client.reply_calls[1]["messages"]) == 3


def test_send_returns_apology_on_failure() -> None:
    client = FakeAssistantClient(error=RuntimeError("down"))
    session = ChatSession(identity="a@x.com")

    reply = asyncio.run(
        _service(client).send(session, "Hi", default_profile("Ana", NOW))
    )

    assert reply == CONNECTION_ERROR_REPLY
    assert session.history == []


def test_send_substitutes_empty_reply() -> None:
    client = FakeAssistantClient(reply_text="")
    session = ChatSession(identity="a@x.com")

    reply = asyncio.run(
        _service(client).send(session, "Hi", default_profile("Ana", NOW))
    )

    assert reply == EMPTY_REPLY


def test_sessions_do_not_share_history() -> None:
    client = FakeAssistantClient()
    service = _service(client)
    first = ChatSession(identity="a@x.com")
    second = ChatSession(identity="b@x.com")

    asyncio.run(service.send(first, "Hi", default_profile("Ana", NOW)))
    asyncio.run(service.send(second, "Hello", default_profile("Ben", NOW)))

    assert len(first.history) == 2
    assert len(second.history) == 2
    assert "The user is Ben" in str(client.reply_calls[1]["instructions"])
