from __future__ import annotations

"""
LLM-backed Remote Analyzer.

Sends (truncated) file content to an OpenAI-compatible chat-completions
endpoint and turns the JSON object in the reply into the analysis payload.
Every failure surfaces as AnalyzeError so the retry executor handles it.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

from filescope.core.analysis.heuristic import classify_file
from filescope.core.pipeline.components.reader import read_text
from filescope.domain.errors import AnalyzeError
from filescope.infra.network import API_KEY_ENV, DEFAULT_TIMEOUT, request_chat_completion

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CONSTANTS
# -----------------------------------------------------------------------------

DEFAULT_ENDPOINT = "https://api.deepseek.com/v1"
DEFAULT_REMOTE_MODEL = "deepseek-chat"
DEFAULT_MAX_CONTENT_CHARS = 50_000
TRUNCATION_MARKER = "\n... [content truncated]"

_PROMPT_TEMPLATE = (
    "Analyze the following source file. Decide what kind of file it is "
    "(page, component, hook, utility, configuration, ...) and extract its key "
    "information.\n\n"
    "File path: {path}\n"
    "File content:\n{content}\n\n"
    "Reply with a single JSON object with the keys: type, description, "
    "business_context, dependencies."
)

_FENCE_RX = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


# -----------------------------------------------------------------------------
# PROMPT & REPLY HANDLING
# -----------------------------------------------------------------------------

def build_messages(path: str, content: str) -> List[Dict[str, str]]:
    return [{"role": "user", "content": _PROMPT_TEMPLATE.format(path=path, content=content)}]


def parse_reply(reply: str) -> Dict[str, Any]:
    """
    Extract the JSON object from a model reply.

    Markdown code fences around the object are tolerated.

    Raises:
        AnalyzeError: If the reply is not a JSON object.
    """
    text = reply.strip()
    match = _FENCE_RX.match(text)
    if match:
        text = match.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalyzeError(f"Model reply is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise AnalyzeError("Model reply is not a JSON object")
    return data


# -----------------------------------------------------------------------------
# ANALYZER
# -----------------------------------------------------------------------------

class RemoteAnalyzer:
    """
    Callable analyzer delegating the description of a file to a remote LLM.
    """

    def __init__(
            self,
            endpoint: str = DEFAULT_ENDPOINT,
            model: str = DEFAULT_REMOTE_MODEL,
            api_key: Optional[str] = None,
            timeout: float = DEFAULT_TIMEOUT,
            max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
    ) -> None:
        """
        Args:
            endpoint: Base URL of the chat-completions API.
            model: Remote model identifier.
            api_key: Bearer key; defaults to the FILESCOPE_API_KEY variable.
            timeout: Per-request timeout in seconds.
            max_content_chars: Content beyond this many characters is cut.
        """
        self.endpoint = endpoint
        self.model = model
        self.api_key = api_key if api_key is not None else os.environ.get(API_KEY_ENV)
        self.timeout = timeout
        self.max_content_chars = max_content_chars

    def __call__(self, path: str, name: str, extension: str, size: int) -> Optional[Dict[str, Any]]:
        try:
            content = read_text(path, limit=self.max_content_chars + 1)
        except OSError as e:
            raise AnalyzeError(f"Cannot read file: {e}", path=path) from e

        if not content.strip():
            return None

        if len(content) > self.max_content_chars:
            content = content[:self.max_content_chars] + TRUNCATION_MARKER
            logger.debug(f"Truncated {path} to {self.max_content_chars} characters")

        try:
            reply = request_chat_completion(
                self.endpoint,
                self.model,
                build_messages(path, content),
                api_key=self.api_key,
                timeout=self.timeout,
            )
            analysis = parse_reply(reply)
        except AnalyzeError as e:
            e.path = path
            raise

        payload: Dict[str, Any] = {
            "type": classify_file(name, extension),
            "description": "",
        }
        payload.update(analysis)
        payload.update({"name": name, "path": path, "size": size, "extension": extension})
        return payload

    def __repr__(self) -> str:
        return f"RemoteAnalyzer(endpoint={self.endpoint!r}, model={self.model!r})"
