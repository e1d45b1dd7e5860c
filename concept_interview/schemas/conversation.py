"""
Conversation Schema for the App Concept Interview

Holds the in-memory state of one interview session: the chat transcript,
the choice set for the question currently on screen, the round counter and
the concepts produced at the end.
"""

from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class Stage(str, Enum):
    """Phase of the interview."""
    INITIAL = "initial"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Author(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Classification(str, Enum):
    """How the model judged the user's opening prompt."""
    VALID = "VALID"
    ABSTRACT = "ABSTRACT"
    INVALID = "INVALID"


@dataclass
class ChatMessage:
    """A single line of the transcript."""
    text: str
    author: Author
    id: int
    opacity: float = 1.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "author": self.author.value,
            "opacity": self.opacity,
        }


@dataclass
class Choice:
    """One selectable answer to the current question."""
    label: str
    selected: bool = False

    def to_dict(self) -> dict:
        return {"label": self.label, "selected": self.selected}


@dataclass
class KeyFeature:
    name: str
    description: str


@dataclass
class AppConcept:
    """An app idea synthesized from the interview answers."""
    name: str
    description: str
    key_features: list[KeyFeature] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "key_features": [
                {"name": f.name, "description": f.description}
                for f in self.key_features
            ],
        }

    def to_markdown(self) -> str:
        lines = [f"## {self.name}", "", self.description, "", "**Key features:**"]
        for feature in self.key_features:
            lines.append(f"- **{feature.name}**: {feature.description}")
        return "\n".join(lines)


@dataclass
class QuestionReply:
    """A parsed question from the model with its answer options."""
    question: str
    options: list[str]


@dataclass
class ConversationState:
    """
    Complete state of one interview session.

    Only the controller mutates this; the web layer reads it through to_dict().
    """
    stage: Stage = Stage.INITIAL
    messages: list[ChatMessage] = field(default_factory=list)
    choices: list[Choice] = field(default_factory=list)
    selected: list[str] = field(default_factory=list)
    current_question: str = ""
    question_count: int = 0
    progress: int = 0
    answers: list[dict] = field(default_factory=list)
    concepts: list[AppConcept] = field(default_factory=list)
    is_loading: bool = False
    notice: Optional[dict] = None
    next_message_id: int = 1

    def add_message(self, text: str, author: Author) -> ChatMessage:
        """Append a message, fading every earlier one."""
        for msg in self.messages:
            msg.opacity = msg.opacity * 0.5
        message = ChatMessage(text=text, author=author, id=self.next_message_id)
        self.next_message_id += 1
        self.messages.append(message)
        return message

    def selected_in_choices(self) -> list[str]:
        """Labels currently marked selected in the choice list."""
        return [c.label for c in self.choices if c.selected]

    def history(self) -> list[dict]:
        """Transcript as role-tagged messages for the model."""
        return [
            {"role": msg.author.value, "content": msg.text}
            for msg in self.messages
        ]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "stage": self.stage.value,
            "messages": [m.to_dict() for m in self.messages],
            "choices": [c.to_dict() for c in self.choices],
            "selected": list(self.selected),
            "current_question": self.current_question,
            "question_count": self.question_count,
            "progress": self.progress,
            "answers": [dict(a) for a in self.answers],
            "concepts": [c.to_dict() for c in self.concepts],
            "is_loading": self.is_loading,
            "notice": self.notice,
        }
