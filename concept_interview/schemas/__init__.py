"""
Data structures shared by the interview controller, the gateway and the web layer.
"""

from .conversation import (
    Stage,
    Author,
    ChatMessage,
    Choice,
    KeyFeature,
    AppConcept,
    QuestionReply,
    Classification,
    ConversationState,
)

__all__ = [
    "Stage",
    "Author",
    "ChatMessage",
    "Choice",
    "KeyFeature",
    "AppConcept",
    "QuestionReply",
    "Classification",
    "ConversationState",
]
