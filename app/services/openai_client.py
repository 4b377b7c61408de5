"""
Chat-completion client for an OpenAI-compatible API.

All AI features (grammar checking, slide generation, wording variations,
suggestions, style analysis) go through ``OpenAIChatService.complete``.

Public API
----------
OpenAIChatService.complete(system_prompt, user_prompt, ...) -> str
OpenAIChatService.parse_json_lenient(text)                  -> (ok, value)
get_llm_service()                                           -> FastAPI dependency
"""
from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LLMError(Exception):
    """Base class for LLM failures surfaced to routers."""


class LLMNotConfiguredError(LLMError):
    """No API key is configured."""

    def __init__(self) -> None:
        super().__init__("OpenAI API key not configured")


class LLMServiceError(LLMError):
    """Transport failure, non-200 reply or empty completion."""


class LLMResponseFormatError(LLMError):
    """The completion could not be parsed into the expected structure."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


# ---------------------------------------------------------------------------
# Main service class
# ---------------------------------------------------------------------------

class OpenAIChatService:
    """
    Thin async wrapper over ``POST {base_url}/chat/completions``.

    Caps concurrent requests with a semaphore. Unlike a bare HTTP call it
    raises typed errors so each route can decide between failing the request
    and falling back to default content.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = (api_key if api_key is not None else settings.OPENAI_API_KEY).strip()
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.default_model = settings.OPENAI_FAST_MODEL
        self.timeout = httpx.Timeout(float(settings.OPENAI_TIMEOUT), connect=10.0)
        self._transport = transport
        self._semaphore = asyncio.Semaphore(settings.LLM_MAX_CONCURRENT)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise LLMNotConfiguredError()

    # ------------------------------------------------------------------
    # Primary API
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        json_mode: bool = False,
    ) -> str:
        """
        Run one chat completion and return the stripped reply text.

        Raises:
            LLMNotConfiguredError: no API key.
            LLMServiceError: HTTP/transport failure or empty reply.
        """
        self.ensure_configured()

        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        payload: Dict[str, Any] = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with self._semaphore:
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    resp = await client.post(
                        f"{self.base_url}/chat/completions",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json=payload,
                    )
            except httpx.TimeoutException as exc:
                logger.error("complete: request timed out after %s", self.timeout)
                raise LLMServiceError("LLM request timed out") from exc
            except httpx.HTTPError as exc:
                logger.error("complete: connection error - %s", exc)
                raise LLMServiceError(f"LLM connection error: {exc}") from exc

        if resp.status_code != 200:
            logger.error(
                "complete: API returned HTTP %d: %s",
                resp.status_code,
                resp.text[:300],
            )
            raise LLMServiceError(f"LLM API returned HTTP {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise LLMServiceError("Malformed completion payload") from exc

        content = (content or "").strip()
        if not content:
            raise LLMServiceError("No response from OpenAI")
        return content

    async def check_health(self) -> bool:
        """Return True when the models endpoint answers with the configured key."""
        if not self.is_configured:
            return False
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(10.0), transport=self._transport
            ) as client:
                resp = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            return resp.status_code == 200
        except httpx.HTTPError as exc:
            logger.warning("check_health: %s", exc)
            return False

    # ------------------------------------------------------------------
    # Lenient JSON parsing
    # ------------------------------------------------------------------

    @classmethod
    def parse_json_lenient(cls, response: str) -> Tuple[bool, Any]:
        """
        Try several strategies to get JSON out of a chatty completion.

        Handles:
        - Markdown code fences (```json … ```, ``` … ```)
        - Trailing commas before ] or }
        - Python-style True / False / None
        - Surrounding prose - finds the first [...] or {...} block

        Returns ``(success, parsed_value)``.
        """
        if not response:
            return False, None

        text = response.strip()

        ok, val = cls._try_json(text)
        if ok:
            return True, val

        stripped = cls.strip_code_fences(text)
        if stripped != text:
            ok, val = cls._try_json(stripped)
            if ok:
                return True, val
            text = stripped

        fixed = cls._fix_json_issues(text)
        ok, val = cls._try_json(fixed)
        if ok:
            return True, val

        for bracket_pair in (("[", "]"), ("{", "}")):
            fragment = cls._extract_json_structure(text, *bracket_pair)
            if fragment:
                ok, val = cls._try_json(fragment)
                if ok:
                    return True, val
                ok, val = cls._try_json(cls._fix_json_issues(fragment))
                if ok:
                    return True, val

        logger.warning(
            "parse_json_lenient: all strategies failed. Preview: %s",
            response[:400],
        )
        return False, None

    @staticmethod
    def _try_json(text: str) -> Tuple[bool, Any]:
        try:
            return True, json.loads(text)
        except (json.JSONDecodeError, ValueError):
            return False, None

    @staticmethod
    def strip_code_fences(text: str) -> str:
        """Remove ```json / ``` delimiters that LLMs often wrap output in."""
        text = re.sub(r"^```(?:json|javascript|text)?\s*\n?", "", text.strip(), flags=re.IGNORECASE)
        text = re.sub(r"\n?```\s*$", "", text)
        return text.strip()

    @staticmethod
    def _fix_json_issues(text: str) -> str:
        """Repair the most common JSON mangling patterns from LLMs."""
        text = re.sub(r",(\s*[}\]])", r"\1", text)
        text = re.sub(r"\bTrue\b", "true", text)
        text = re.sub(r"\bFalse\b", "false", text)
        text = re.sub(r"\bNone\b", "null", text)
        return text.strip()

    @staticmethod
    def _extract_json_structure(text: str, open_b: str, close_b: str) -> str:
        """
        Find the first complete balanced open_b … close_b structure in *text*.
        Returns the matched fragment, or empty string if not found.
        """
        start = text.find(open_b)
        if start == -1:
            return ""

        depth = 0
        in_string = False
        escape_next = False

        for i, ch in enumerate(text[start:], start=start):
            if escape_next:
                escape_next = False
                continue
            if ch == "\\" and in_string:
                escape_next = True
                continue
            if ch == '"':
                in_string = not in_string
                continue
            if in_string:
                continue
            if ch == open_b:
                depth += 1
            elif ch == close_b:
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        return ""


def get_llm_service() -> OpenAIChatService:
    """FastAPI dependency returning a client bound to the current settings."""
    return OpenAIChatService()
