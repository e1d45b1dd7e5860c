"""
Shared fixtures for interview tests.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from concept_interview.agents.concept_agent import ConceptInterviewAgent, InterviewConfig
from concept_interview.agents.gateway import ConceptGateway

from llm_fakes import ScriptedLLM, question_reply


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def make_agent(llm):
    def _make(**config_kwargs):
        config = InterviewConfig(**config_kwargs)
        gateway = ConceptGateway(
            llm,
            templates=config.templates,
            option_count=config.option_count,
            concept_count=config.concept_count,
            feature_count=config.feature_count,
        )
        return ConceptInterviewAgent(gateway, config)
    return _make


@pytest.fixture
def started_agent(llm, make_agent):
    """Agent already showing its first question (classification disabled)."""
    agent = make_agent(classify_prompt=False)
    llm.queue(question_reply("Who is the app for?", ["Kids", "Adults", "Seniors", "Teams", "Coaches"]))
    assert agent.submit_prompt("a fitness app")
    return agent
