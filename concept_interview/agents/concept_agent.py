"""
Concept Interview Agent - the conversation controller.

Runs the interview as a small state machine:

    initial --submit_prompt--> in_progress --submit_selections (last round)--> completed
                                   |  ^
                                   +--+ toggle_choice / submit_selections / request_more_options

Every gateway failure is caught here, reported through state.notice (and as
an assistant message once the chat is on screen), and leaves the stage,
counter and choice set exactly as they were.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .gateway import ConceptGateway
from ..llm.manager import create_llm_manager
from ..errors import (
    InterviewError,
    EmptyInput,
    PromptRejected,
    TransportFailure,
    MalformedResponse,
    NoNewOptions,
)
from ..prompts.concept_prompts import PromptTemplates, DEFAULT_TEMPLATES
from ..schemas.conversation import (
    Author,
    Choice,
    Classification,
    ConversationState,
    QuestionReply,
    Stage,
)

logger = logging.getLogger(__name__)


@dataclass
class InterviewConfig:
    """Knobs that used to differ between the interview variants."""
    max_rounds: int = 5
    option_count: int = 5
    concept_count: int = 3
    feature_count: int = 3
    classify_prompt: bool = True
    templates: PromptTemplates = field(default_factory=lambda: DEFAULT_TEMPLATES)

    def __post_init__(self):
        if self.max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        if self.option_count < 1:
            raise ValueError("option_count must be at least 1")


class ConceptInterviewAgent:
    """
    Interviews the user about an app idea and collects app concepts.

    The agent:
    - Checks the opening prompt is a concrete app idea
    - Asks one multiple-choice question per round
    - Lets the user toggle answers and ask for more options
    - Synthesizes app concepts after the last round
    """

    def __init__(self, gateway: ConceptGateway, config: Optional[InterviewConfig] = None):
        self.gateway = gateway
        self.config = config or InterviewConfig()
        self.state = ConversationState()

    @property
    def stage(self) -> Stage:
        return self.state.stage

    def is_complete(self) -> bool:
        return self.state.stage == Stage.COMPLETED

    def _progress_for(self, question_count: int) -> int:
        return min(100, int(question_count * 100 / self.config.max_rounds))

    def _is_final_round(self) -> bool:
        return self.state.question_count >= self.config.max_rounds - 1

    def _report(self, error: InterviewError):
        """Surface a recovered error to the user."""
        logger.info("interview error (%s): %s", error.kind, error)
        self.state.notice = error.to_dict()
        if self.state.stage == Stage.IN_PROGRESS and isinstance(
            error, (TransportFailure, MalformedResponse)
        ):
            self.state.add_message(error.user_message, Author.ASSISTANT)

    def _show_question(self, reply: QuestionReply):
        self.state.add_message(reply.question, Author.ASSISTANT)
        self.state.current_question = reply.question
        self.state.choices = [Choice(label=option) for option in reply.options]
        self.state.selected = []

    def submit_prompt(self, prompt: str) -> bool:
        """
        Start the interview from the user's app idea.

        Returns:
            True if the first question is now on screen
        """
        if self.state.stage != Stage.INITIAL or self.state.is_loading:
            return False

        self.state.notice = None
        prompt = (prompt or "").strip()

        try:
            if not prompt:
                raise EmptyInput("Prompt is empty")

            self.state.is_loading = True
            if self.config.classify_prompt:
                verdict = self.gateway.classify_prompt(prompt)
                logger.debug("prompt classified as %s", verdict.value)
                if verdict != Classification.VALID:
                    raise PromptRejected(verdict.value)

            reply = self.gateway.ask_question(
                [{"role": "user", "content": prompt}],
                first=True
            )
        except InterviewError as e:
            self._report(e)
            return False
        finally:
            self.state.is_loading = False

        self.state.add_message(prompt, Author.USER)
        self._show_question(reply)
        self.state.question_count = 1
        self.state.progress = self._progress_for(1)
        self.state.stage = Stage.IN_PROGRESS
        return True

    def toggle_choice(self, label: str) -> bool:
        """Flip the selection of every choice with this label."""
        if self.state.stage != Stage.IN_PROGRESS or self.state.is_loading:
            return False

        matched = False
        for choice in self.state.choices:
            if choice.label == label:
                choice.selected = not choice.selected
                matched = True

        if not matched:
            return False

        if label in self.state.selected:
            self.state.selected.remove(label)
        else:
            self.state.selected.append(label)
        return True

    def submit_selections(self) -> bool:
        """
        Answer the current question with the selected choices.

        Before the last round this fetches the next question; on the last
        round it asks for the app concepts and completes the interview.
        Submitting with nothing selected does nothing.

        Returns:
            True if the interview moved forward
        """
        if self.state.stage != Stage.IN_PROGRESS or self.state.is_loading:
            return False
        if not self.state.selected:
            return False

        answer = ", ".join(self.state.selected)
        history = self.state.history() + [{"role": "user", "content": answer}]
        final = self._is_final_round()

        self.state.notice = None
        self.state.is_loading = True
        try:
            if final:
                concepts = self.gateway.synthesize_concepts(history)
            else:
                reply = self.gateway.ask_question(history)
        except InterviewError as e:
            self._report(e)
            return False
        finally:
            self.state.is_loading = False

        self.state.add_message(f"You: {answer}", Author.USER)
        self.state.answers.append({
            "question": self.state.current_question,
            "answer": list(self.state.selected),
        })
        self.state.choices = []
        self.state.selected = []

        if final:
            self.state.current_question = ""
            self.state.concepts = concepts
            self.state.progress = 100
            self.state.stage = Stage.COMPLETED
            logger.info("interview completed with %d concepts", len(concepts))
        else:
            self._show_question(reply)
            self.state.question_count += 1
            self.state.progress = self._progress_for(self.state.question_count)
        return True

    def request_more_options(self) -> int:
        """
        Append extra options to the current question.

        Labels already on screen are skipped so a label is never shown twice
        with different selection states. If nothing new is left, a
        no_new_options notice is set.

        Returns:
            Number of choices added
        """
        if self.state.stage != Stage.IN_PROGRESS or self.state.is_loading:
            return 0

        existing = [c.label for c in self.state.choices]
        self.state.notice = None
        self.state.is_loading = True
        try:
            options = self.gateway.ask_more_options(self.state.current_question, existing)
        except InterviewError as e:
            self._report(e)
            return 0
        finally:
            self.state.is_loading = False

        seen = set(existing)
        added = 0
        for option in options:
            if option in seen:
                continue
            self.state.choices.append(Choice(label=option))
            seen.add(option)
            added += 1

        if not added:
            self._report(NoNewOptions(f"All {len(options)} extra options were already shown"))
        return added

    def reset(self):
        """Throw the session away and start over."""
        self.state = ConversationState()

    def concepts_markdown(self) -> str:
        """The generated concepts as a markdown document."""
        return "\n\n".join(c.to_markdown() for c in self.state.concepts)

    def get_summary(self) -> dict:
        """Answers given so far and the concepts produced."""
        return {
            "idea": self.state.messages[0].text if self.state.messages else "",
            "answers": list(self.state.answers),
            "concepts": [c.to_dict() for c in self.state.concepts],
        }


def create_concept_agent(settings, llm=None) -> ConceptInterviewAgent:
    """
    Build an agent from Settings.

    Args:
        settings: concept_interview.config.Settings
        llm: Optional provider or manager; built from settings when omitted
    """
    if llm is None:
        llm = create_llm_manager(settings)

    config = InterviewConfig(
        max_rounds=settings.max_rounds,
        option_count=settings.option_count,
        classify_prompt=settings.classify_prompt,
    )
    gateway = ConceptGateway(
        llm,
        templates=config.templates,
        option_count=config.option_count,
        concept_count=config.concept_count,
        feature_count=config.feature_count,
        max_tokens=settings.max_tokens,
    )
    return ConceptInterviewAgent(gateway, config)
