"""
Concept Gateway - the language-model side of the interview.

Each call is a single stateless request: the full transcript is resent every
time and the reply is parsed into the structure the controller needs.
Transport problems surface as TransportFailure, unusable replies as
MalformedResponse.
"""

import logging
from typing import Optional, List, Dict

from ..errors import TransportFailure, MalformedResponse
from ..llm.base import Message, LLMResponse
from ..parsing import (
    parse_question_reply,
    parse_options_reply,
    parse_concepts_reply,
    parse_classification,
)
from ..prompts.concept_prompts import PromptTemplates, DEFAULT_TEMPLATES
from ..schemas.conversation import AppConcept, Classification, QuestionReply

logger = logging.getLogger(__name__)


class ConceptGateway:
    """
    Asks an LLM for interview questions, extra options and final concepts.

    The llm argument is anything with a chat(messages, max_tokens=..., model=...)
    method returning an LLMResponse: an LLMProvider or an LLMManager.
    """

    def __init__(
        self,
        llm,
        templates: Optional[PromptTemplates] = None,
        option_count: int = 5,
        concept_count: int = 3,
        feature_count: int = 3,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        self.llm = llm
        self.templates = templates or DEFAULT_TEMPLATES
        self.option_count = option_count
        self.concept_count = concept_count
        self.feature_count = feature_count
        self.model = model
        self.max_tokens = max_tokens

    def _format(self, template: str, **extra) -> str:
        return template.format(
            option_count=self.option_count,
            concept_count=self.concept_count,
            feature_count=self.feature_count,
            **extra
        )

    def _send(self, system_prompt: str, history: List[Dict[str, str]], purpose: str) -> str:
        messages = [Message(role="system", content=system_prompt)]
        messages.extend(Message.coerce(m) for m in history)

        logger.debug("gateway %s: sending %d messages", purpose, len(messages))
        try:
            response: LLMResponse = self.llm.chat(
                messages,
                max_tokens=self.max_tokens,
                model=self.model,
            )
        except Exception as e:
            logger.warning("gateway %s: transport failure: %s", purpose, e)
            raise TransportFailure(f"Failed to reach the AI service: {e}") from e

        content = response.content if response is not None else None
        if not content or not content.strip():
            raise MalformedResponse("No content in AI response")

        logger.debug("gateway %s: raw reply %r", purpose, content[:500])
        return content

    def classify_prompt(self, prompt: str) -> Classification:
        """Judge whether the opening prompt is a usable app idea."""
        reply = self._send(
            self.templates.classify,
            [{"role": "user", "content": prompt}],
            "classify"
        )
        return parse_classification(reply)

    def ask_question(self, history: List[Dict[str, str]], first: bool = False) -> QuestionReply:
        """Next question with exactly option_count answer options."""
        template = self.templates.first_question if first else self.templates.next_question
        reply = self._send(self._format(template), history, "question")
        try:
            return parse_question_reply(reply, self.option_count)
        except MalformedResponse as e:
            logger.warning("gateway question: malformed reply: %s", e)
            raise

    def ask_more_options(self, question: str, existing_labels: List[str]) -> List[str]:
        """Additional options for the current question."""
        user_prompt = self._format(
            self.templates.more_options_user,
            question=question,
            existing=", ".join(existing_labels),
        )
        reply = self._send(
            self._format(self.templates.more_options),
            [{"role": "user", "content": user_prompt}],
            "more_options"
        )
        try:
            return parse_options_reply(reply)
        except MalformedResponse as e:
            logger.warning("gateway more_options: malformed reply: %s", e)
            raise

    def synthesize_concepts(self, history: List[Dict[str, str]]) -> List[AppConcept]:
        """Final app concepts built from the whole interview."""
        history = list(history) + [{
            "role": "user",
            "content": "Please generate the app concepts now.",
        }]
        reply = self._send(self._format(self.templates.concepts), history, "concepts")
        try:
            return parse_concepts_reply(reply, self.concept_count, self.feature_count)
        except MalformedResponse as e:
            logger.warning("gateway concepts: malformed reply: %s", e)
            raise
