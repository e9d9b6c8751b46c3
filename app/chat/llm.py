from __future__ import annotations

import logging
from typing import Any, Dict

from app.config import get_settings
from llm.client import LLMClient

logger = logging.getLogger(__name__)


def draft_email_reply(email: Dict[str, Any]) -> str | None:
    """Best-effort reply draft. None when the LLM is disabled or fails."""
    settings = get_settings()
    if not settings.LLM_ENABLED:
        return None

    llm_client = LLMClient(
        model=settings.LLM_MODEL,
        provider=settings.LLM_PROVIDER,
        api_key=settings.OPENAI_API_KEY,
        temperature=settings.LLM_TEMPERATURE,
        timeout_s=settings.LLM_TIMEOUT_S,
    )
    try:
        return llm_client.draft_email_reply(email=email)
    except Exception as e:
        logger.warning("email reply draft failed: %s", e)
        return None
