"""Knowledge base, prompt and event models for the support pipeline.

Rows come from the Google Sheet, candidates are derived per query and never
persisted, and prompt messages are handed verbatim to the completion API.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

REQUIRED_FIELDS = ("Question", "Answer", "Embedding")
EMBEDDING_FIELD = "Embedding"

WARNING_COLOR = 0xFF0000


class Role(Enum):
    """Chat message roles accepted by the completion API."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class OSCategory(Enum):
    """Operating system a user declared through their server roles.

    Declaration order is the priority order when a member holds several.
    """
    WINDOWS = "Windows client"
    MACOS = "macOS client"
    LINUX = "Linux client"

    @property
    def label(self) -> str:
        return self.value


@dataclass
class KnowledgeRow:
    """One Q&A row of the knowledge sheet.

    Attributes:
        question: Historical user question (the embedded text).
        answer: Answer given for that question.
        fields: Every named cell of the row, kept for write-back.
        embedding: Resolved vector, set once cached or computed.
    """
    question: str
    answer: str
    fields: Dict[str, str] = field(default_factory=dict)
    embedding: Optional[List[float]] = None


@dataclass
class Corpus:
    """Ordered rows of the knowledge sheet plus schema facts read once."""
    rows: List[KnowledgeRow] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    has_embedding_column: bool = False

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def questions(self) -> List[str]:
        return [row.question for row in self.rows]


@dataclass
class RankedCandidate:
    question: str
    answer: str
    similarity: float


@dataclass(frozen=True)
class PromptMessage:
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class WarningEmbed:
    """Advisory notice attached to the reply as a Discord embed."""
    description: str
    type: str = "rich"
    color: int = WARNING_COLOR

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "description": self.description, "color": self.color}


@dataclass
class KnowledgeBaseResult:
    corpus: Corpus
    warnings: List[WarningEmbed] = field(default_factory=list)


@dataclass
class SupportEvent:
    """Normalized Discord message that reached the support pipeline.

    Attributes:
        message_id: Id of the triggering message, used as reply reference.
        channel_id: Channel the reply is posted to.
        channel_name: Channel name, checked against the support channel.
        content: Raw message content (mentions included).
        author_name: Username, used in logs only.
        role_names: Resolved names of the author's guild roles.
        mention_ids: User ids mentioned in the message.
        timestamp: When the message was sent (timezone-aware).
    """
    message_id: str
    channel_id: str
    channel_name: str
    content: str
    author_name: str
    timestamp: datetime
    role_names: List[str] = field(default_factory=list)
    mention_ids: List[str] = field(default_factory=list)
