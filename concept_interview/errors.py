"""
Error kinds raised while running an interview.

Every error derives from InterviewError so the controller can recover all of
them at one boundary and turn them into something the user can read.
"""

from typing import Optional


class InterviewError(Exception):
    """Base class for recoverable interview errors."""

    kind = "interview_error"
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str = "", user_message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.user_message, "detail": str(self)}


class EmptyInput(InterviewError):
    kind = "empty_input"
    user_message = "Please describe the app you would like to create."


class PromptRejected(InterviewError):
    """The model classified the initial prompt as abstract or invalid."""

    kind = "prompt_rejected"
    user_message = "I couldn't turn that into an app idea. Please try describing it differently."

    def __init__(self, classification: str, message: str = ""):
        self.classification = classification
        if classification == "ABSTRACT":
            user_message = (
                "That idea is a bit abstract. Could you describe a more specific "
                "app, for example who would use it and what it would help them do?"
            )
        else:
            user_message = None
        super().__init__(message or f"Prompt classified as {classification}", user_message)


class TransportFailure(InterviewError):
    """Network or HTTP error while calling the language model."""

    kind = "transport_failure"
    user_message = "I'm sorry, I couldn't reach the AI service. Please try again."


class MalformedResponse(InterviewError):
    """The model replied, but not with the structure that was asked for."""

    kind = "malformed_response"
    user_message = "I'm sorry, I encountered an error processing the response. Please try again."


class NoNewOptions(InterviewError):
    """Every extra option the model offered is already on screen."""

    kind = "no_new_options"
    user_message = "No new options came back this time. Pick from the ones shown or try again."
