"""
Agent modules for the App Concept Interviewer.
"""

from .gateway import ConceptGateway
from .concept_agent import ConceptInterviewAgent, InterviewConfig, create_concept_agent

__all__ = ["ConceptGateway", "ConceptInterviewAgent", "InterviewConfig", "create_concept_agent"]
