"""Nutrition chat assistant."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from nutrivision.domain.chat import ChatMessage
from nutrivision.domain.profile import UserProfile
from nutrivision.services.assistant import AssistantClient
from nutrivision.services.targets import compute_bmi

EMPTY_REPLY = "I'm sorry, I couldn't generate a response."
CONNECTION_ERROR_REPLY = "I'm having trouble connecting to the server. Please try again."

_logger = logging.getLogger(__name__)


@dataclass
class ChatSession:
    """Conversation owned by one logged-in identity."""

    identity: str
    instructions: str | None = None
    history: list[ChatMessage] = field(default_factory=list)


@dataclass
class ChatService:
    """Sends chat turns to the assistant backend."""

    client: AssistantClient
    model: str
    clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC)

    async def send(self, session: ChatSession, text: str, profile: UserProfile) -> str:
        """Send a user message and return the assistant reply.

        The system instructions are fixed from the profile on the first turn.
        Failures return an apology and leave the history unchanged.
        """
        if session.instructions is None:
            session.instructions = build_instructions(profile)
        message = ChatMessage(role="user", text=text, sent_at=self.clock())
        try:
            reply = await self.client.reply(
                model=self.model,
                instructions=session.instructions,
                messages=[*session.history, message],
            )
        except Exception:
            _logger.exception("Chat reply failed for %s", session.identity)
            return CONNECTION_ERROR_REPLY
        reply = reply or EMPTY_REPLY
        session.history.append(message)
        session.history.append(ChatMessage(role="model", text=reply, sent_at=self.clock()))
        return reply


def build_instructions(profile: UserProfile) -> str:
    """Return system instructions tailored to the user's profile."""
    bmi = compute_bmi(profile.weight, profile.height).bmi
    return (
        'You are "NutriVision Chatbot", a specialized assistant for the '
        "NutriVision app.\n\n"
        "Context:\n"
        f"- The user is {profile.name}, age {profile.age:g}, weight "
        f"{profile.weight:g}kg, goal {profile.goal}.\n"
        f"- Calculated BMI: {bmi:.1f}.\n\n"
        "Rules:\n"
        "1. Only answer questions about nutrition, fitness, diet, health and "
        "the app's features (scanner, meal planner, dashboard).\n"
        "2. Politely refuse off-topic requests and steer back to health.\n"
        "3. Be encouraging, empathetic and professional.\n"
        "4. Keep answers concise but helpful.\n"
        "5. Use the user's goal and BMI to tailor your advice."
    )
