"""
Prompt templates for the App Concept Interviewer.
"""

from .concept_prompts import (
    PromptTemplates,
    DEFAULT_TEMPLATES,
    CLASSIFY_SYSTEM_PROMPT,
    FIRST_QUESTION_SYSTEM_PROMPT,
    NEXT_QUESTION_SYSTEM_PROMPT,
    MORE_OPTIONS_SYSTEM_PROMPT,
    CONCEPTS_SYSTEM_PROMPT,
)

__all__ = [
    "PromptTemplates",
    "DEFAULT_TEMPLATES",
    "CLASSIFY_SYSTEM_PROMPT",
    "FIRST_QUESTION_SYSTEM_PROMPT",
    "NEXT_QUESTION_SYSTEM_PROMPT",
    "MORE_OPTIONS_SYSTEM_PROMPT",
    "CONCEPTS_SYSTEM_PROMPT",
]
