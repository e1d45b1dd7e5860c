"""
App Concept Interviewer.

Interviews a user about an app idea through a short run of AI-generated
multiple-choice questions, then asks a language model to synthesize app
concepts from the answers.
"""

__version__ = "0.1.0"
