"""
Runtime settings read from the environment.

A .env file in the working directory (or the project root) is loaded first;
variables already set in the environment win.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv()
load_dotenv(_PROJECT_ROOT / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class Settings:
    """Settings for the LLM backend and the interview."""
    provider: Optional[str] = None      # openai, groq, proxy; None = first configured
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    groq_api_key: Optional[str] = None
    proxy_url: Optional[str] = None
    max_rounds: int = 5
    option_count: int = 5
    classify_prompt: bool = True
    port: int = 5001
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            provider=(os.getenv("LLM_PROVIDER") or None),
            model=(os.getenv("LLM_MODEL") or None),
            max_tokens=_env_int("LLM_MAX_TOKENS", None),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_base_url=os.getenv("OPENAI_BASE_URL"),
            groq_api_key=os.getenv("GROQ_API_KEY"),
            proxy_url=os.getenv("LLM_PROXY_URL"),
            max_rounds=_env_int("INTERVIEW_MAX_ROUNDS", 5),
            option_count=_env_int("INTERVIEW_OPTION_COUNT", 5),
            classify_prompt=_env_bool("INTERVIEW_CLASSIFY_PROMPT", True),
            port=_env_int("PORT", 5001),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
