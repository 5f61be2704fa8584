from __future__ import annotations

"""
Network Communication Infrastructure.

HTTP clients for remote analysis services.
"""

from filescope.infra.network.common import API_KEY_ENV, DEFAULT_TIMEOUT, USER_AGENT
from filescope.infra.network.llm_client import build_headers, request_chat_completion

__all__ = [
    "API_KEY_ENV",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "build_headers",
    "request_chat_completion",
]
