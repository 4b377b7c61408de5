"""
LLM-backed service dependencies and their error mapping.

Routes depend on ``get_grammar_checker`` / ``get_content_generator``; tests
swap the underlying client by overriding ``get_llm_service``.
"""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status

from app.services.content_generator import ContentGenerator
from app.services.grammar_checker import GrammarChecker
from app.services.openai_client import (
    LLMError,
    LLMNotConfiguredError,
    LLMResponseFormatError,
    OpenAIChatService,
    get_llm_service,
)

logger = logging.getLogger(__name__)


def get_grammar_checker(llm: OpenAIChatService = Depends(get_llm_service)) -> GrammarChecker:
    return GrammarChecker(llm)


def get_content_generator(llm: OpenAIChatService = Depends(get_llm_service)) -> ContentGenerator:
    return ContentGenerator(llm)


def llm_http_error(exc: LLMError, fallback: str) -> HTTPException:
    """
    Translate a service error into a 500 response.

    Configuration and format errors keep their own message; transport
    failures use *fallback*.
    """
    if isinstance(exc, (LLMNotConfiguredError, LLMResponseFormatError)):
        detail = str(exc)
    else:
        logger.error("%s: %s", fallback, exc)
        detail = fallback
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
