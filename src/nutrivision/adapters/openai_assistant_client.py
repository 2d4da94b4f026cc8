"""OpenAI Responses API client for structured generation and chat."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrivision.domain.chat import ChatMessage
from nutrivision.services.assistant import AssistantClient

_ROLES = {"user": "user", "model": "assistant"}


@dataclass
class OpenAIAssistantClient(AssistantClient):
    """Assistant client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAssistantClient":
        """Create an OpenAI assistant client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Call OpenAI Responses API with structured outputs."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def reply(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[ChatMessage],
    ) -> str:
        """Send the conversation so far and return the reply text."""
        response = await self.client.responses.create(
            model=model,
            instructions=instructions,
            input=[
                {"role": _ROLES.get(message.role, "user"), "content": message.text}
                for message in messages
            ],
            store=False,
        )
        return response.output_text or ""
