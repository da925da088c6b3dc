"""Core data structures for reply generation: input snapshot and backend output."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ReplyStyle(str, Enum):
    """Tone of a single reply suggestion."""
    HUMOROUS = "humorous"
    CARING = "caring"
    RATIONAL = "rational"
    CASUAL = "casual"
    FORMAL = "formal"


class LLMTask(str, Enum):
    """What the backend call is for. Extraction tasks return one JSON object."""
    REPLY = "reply"
    PROFILE_EXTRACTION = "profile_extraction"
    MEMORY_EXTRACTION = "memory_extraction"


class MessageDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


@dataclass
class ContactKey:
    """Identity of one conversation on one chat app."""

    platform: str
    app: str
    conversation_id: str
    peer_id: str
    is_group: bool = False
    account_id: Optional[str] = None


@dataclass
class Message:
    """A single chat message. ``text`` is untrusted user content."""

    id: str
    contact_key: ContactKey
    direction: MessageDirection
    sender_name: str
    text: str
    timestamp: float


@dataclass
class ConversationContext:
    contact_key: ContactKey
    recent_messages: List[Message]
    """Oldest first."""
    current_message: Message
    """The message the user wants to answer."""


@dataclass
class ContactProfile:
    """What is known about the other party; assembled by the contact store."""

    key: ContactKey
    display_name: str
    interests: List[str] = field(default_factory=list)
    relationship_type: Optional[str] = None
    notes: Optional[str] = None
    basic_info: Dict[str, str] = field(default_factory=dict)
    communication_style: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMInput:
    """Everything a backend needs to produce reply suggestions.

    ``thought_hint`` is free-form guidance appended to the prompt; the
    orchestrator's parse-error retry appends a strict JSON instruction to it.
    """

    context: ConversationContext
    styles: List[ReplyStyle]
    language: str = "auto"
    """"zh", "en" or "auto"."""
    profile: Optional[ContactProfile] = None
    memory_summary: Optional[str] = None
    max_length: Optional[int] = None
    task: LLMTask = LLMTask.REPLY
    thought_direction: Optional[str] = None
    thought_hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping of every field (enums become their values)."""
        return asdict(self)


@dataclass
class ReplyCandidate:
    text: str
    style: ReplyStyle
    confidence: float = 0.8


@dataclass
class LLMOutput:
    """Result of one successful backend call."""

    candidates: List[ReplyCandidate]
    model: str
    latency_ms: float = 0.0
    raw: Optional[Any] = None
