from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from filescope.domain.errors import AnalyzeError
from filescope.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


def build_headers(api_key: Optional[str] = None) -> Dict[str, str]:
    headers = {"User-Agent": USER_AGENT, "Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def request_chat_completion(
        endpoint: str,
        model: str,
        messages: List[Dict[str, str]],
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = 0.0,
) -> str:
    """
    Send an OpenAI-compatible chat-completions request and return the reply text.

    Args:
        endpoint: Base URL of the API (the '/chat/completions' path is appended).
        model: Remote model identifier.
        messages: Chat messages in role/content form.
        api_key: Optional bearer token.
        timeout: Request timeout in seconds.
        temperature: Sampling temperature.

    Returns:
        str: Content of the first choice.

    Raises:
        AnalyzeError: On transport errors, non-2xx statuses or malformed bodies.
    """
    url = f"{endpoint.rstrip('/')}/chat/completions"
    body: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "stream": False,
    }
    logger.debug(f"Network: Requesting completion from {url} (model={model})")

    try:
        response = requests.post(url, json=body, headers=build_headers(api_key), timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout as e:
        raise AnalyzeError(f"Completion request timed out after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise AnalyzeError(f"Completion request failed: {e}") from e
    except ValueError as e:
        raise AnalyzeError(f"Completion response is not valid JSON: {e}") from e

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise AnalyzeError("Completion response has no message content") from e

    if not isinstance(content, str):
        raise AnalyzeError("Completion message content is not text")
    return content
