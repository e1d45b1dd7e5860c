"""
App Concept Interview Prompt Templates

System prompts used by the gateway. Templates are plain str.format()
strings; the placeholders are {option_count}, {concept_count} and
{feature_count}. Swap in a PromptTemplates instance to change the wording
without touching the controller.
"""

from dataclasses import dataclass


CLASSIFY_SYSTEM_PROMPT = """You review ideas people type into an app-building assistant.
Classify the user's message as exactly one of:
- VALID: a concrete app idea, even if short (e.g. "a fitness app", "recipe sharing for students")
- ABSTRACT: related to apps but too vague to ask about (e.g. "something cool", "an app")
- INVALID: not an app idea at all (greetings, questions, gibberish, harmful requests)

Reply with the single word VALID, ABSTRACT or INVALID and nothing else."""


FIRST_QUESTION_SYSTEM_PROMPT = """You are an AI assistant helping to create an app concept.
Ask a single, clear follow-up question about the app idea.
Then, provide {option_count} possible answers as options, but do not include these in your question.
Keep each option short (a few words).

Important: Format your response as JSON with 'question' and 'options' fields, for example:
{{"question": "Who is the app for?", "options": ["...", "...", "..."]}}
Return exactly {option_count} options and no other text."""


NEXT_QUESTION_SYSTEM_PROMPT = """You are an AI assistant helping to create an app concept.
Based on the previous conversation, ask a single, clear follow-up question about another aspect of the app.
Do not repeat a question that was already asked.
Then, provide {option_count} possible answers as options, but do not include these in your question.
Keep each option short (a few words).

Format your response as JSON with 'question' and 'options' fields.
Return exactly {option_count} options and no other text."""


MORE_OPTIONS_SYSTEM_PROMPT = """You are an AI assistant helping to create an app concept.
Based on the given question and existing choices, provide {option_count} additional, diverse, and relevant options.
These should be different from the existing choices but still closely related to the question.

Format your response as JSON with an 'options' field containing an array of {option_count} strings."""


MORE_OPTIONS_USER_PROMPT = """Current question: "{question}"

Existing choices: {existing}

Generate {option_count} more relevant and diverse options related to this question, different from the existing choices."""


CONCEPTS_SYSTEM_PROMPT = """You are an AI product strategist.
Based on the whole conversation, propose {concept_count} distinct app concepts that fit the user's answers.

For each concept give a short name, a one or two sentence description, and exactly {feature_count} key features,
each with a name and a one sentence description.

Format your response as JSON:
{{"concepts": [{{"name": "...", "description": "...", "key_features": [{{"name": "...", "description": "..."}}]}}]}}
Return exactly {concept_count} concepts and no other text."""


@dataclass
class PromptTemplates:
    """The set of system prompts one interview variant uses."""
    classify: str = CLASSIFY_SYSTEM_PROMPT
    first_question: str = FIRST_QUESTION_SYSTEM_PROMPT
    next_question: str = NEXT_QUESTION_SYSTEM_PROMPT
    more_options: str = MORE_OPTIONS_SYSTEM_PROMPT
    more_options_user: str = MORE_OPTIONS_USER_PROMPT
    concepts: str = CONCEPTS_SYSTEM_PROMPT


DEFAULT_TEMPLATES = PromptTemplates()
