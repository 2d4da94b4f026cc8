"""Domain models for the nutrition chat assistant."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ChatMessage:
    """One turn of a chat conversation."""

    role: str
    text: str
    sent_at: datetime
