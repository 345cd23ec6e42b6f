"""Completion client for the LLM advisor (OpenRouter by default).

Speaks the OpenAI-compatible chat-completions protocol over httpx. Every
failure mode (no API key, transport error, timeout, non-2xx status,
malformed or empty body) surfaces as UpstreamUnavailableError so the chat
flow can substitute its fallback reply. No retries are attempted.
"""

import logging

import httpx

from src.errors.domain import UpstreamUnavailableError
from src.utils.config import AdvisorConfig

logger = logging.getLogger(__name__)


class AdvisorClient:
    """Send one system prompt plus history to the completion endpoint.

    Args:
        config: Endpoint, model, key, timeout and attribution headers.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        config: AdvisorConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        if self._config.http_referer:
            headers["HTTP-Referer"] = self._config.http_referer
        if self._config.app_title:
            headers["X-Title"] = self._config.app_title
        return headers

    async def complete(
        self,
        system_prompt: str,
        history: list[tuple[str, str]],
        message: str,
    ) -> str:
        """Return the advisor's reply to message.

        Args:
            system_prompt: Rendered advisor instructions.
            history: Prior (role, content) turns, oldest first.
            message: The current user message.

        Returns:
            Non-empty completion text.

        Raises:
            UpstreamUnavailableError: On any failure to obtain a reply.
        """
        if not self._config.api_key:
            raise UpstreamUnavailableError("advisor API key is not configured")

        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": role, "content": content} for role, content in history)
        messages.append({"role": "user", "content": message})
        payload = {"model": self._config.model, "messages": messages}
        url = f"{self._config.base_url.rstrip('/')}/chat/completions"

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=payload, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.warning("Advisor request timed out after %ss", self._config.timeout_seconds)
            raise UpstreamUnavailableError("advisor request timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Advisor request failed to send: %s", e)
            raise UpstreamUnavailableError(f"advisor request failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "Advisor returned status %s: %s", response.status_code, response.text[:500]
            )
            raise UpstreamUnavailableError(
                f"advisor returned status {response.status_code}"
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("Advisor response was malformed: %s", e)
            raise UpstreamUnavailableError("advisor response was malformed") from e

        if not isinstance(content, str) or not content:
            raise UpstreamUnavailableError("advisor returned an empty response")
        return content
