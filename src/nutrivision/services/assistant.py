"""Port for the generative-AI backend."""

from typing import Protocol

from nutrivision.domain.chat import ChatMessage


class AssistantClient(Protocol):
    """Interface for structured generation and chat replies."""

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
        """Return JSON output matching the schema."""

    async def reply(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[ChatMessage],
    ) -> str:
        """Return the assistant's next chat message text."""
