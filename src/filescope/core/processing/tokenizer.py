from __future__ import annotations

"""
Token Estimation Engine.

Estimates how many LLM tokens a file's content would consume. BPE encoding
through tiktoken is preferred; when an encoding cannot be loaded (offline
machines download encodings on first use) the count falls back to a
character-density heuristic so analysis never fails on token counting.
"""

import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict

import tiktoken

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CONSTANTS & CACHE
# -----------------------------------------------------------------------------

CHARS_PER_TOKEN_AVG = 4
DEFAULT_ENCODING = "o200k_base"
LEGACY_ENCODING = "cl100k_base"
DEFAULT_MODEL = "gpt-4o"

_ENCODING_CACHE: Dict[str, Any] = {}
_CACHE_LOCK = threading.Lock()


# -----------------------------------------------------------------------------
# STRATEGIES
# -----------------------------------------------------------------------------

class TokenizerStrategy(ABC):
    """
    Abstract base class for token counting algorithms.
    """

    @abstractmethod
    def count(self, text: str, model_id: str) -> int:
        """
        Calculate the token count for a given text segment.

        Args:
            text: Input string to be tokenized.
            model_id: Model identifier used for encoding selection.

        Returns:
            int: Total token count.
        """
        pass


class HeuristicStrategy(TokenizerStrategy):
    """Character density estimation (about four characters per token)."""

    def count(self, text: str, model_id: str) -> int:
        return math.ceil(len(text) / CHARS_PER_TOKEN_AVG)


class TiktokenStrategy(TokenizerStrategy):
    """
    Local BPE encoding through tiktoken.
    """

    def count(self, text: str, model_id: str) -> int:
        encoding = _load_encoding(resolve_encoding_name(model_id))
        return len(encoding.encode(text, disallowed_special=()))


def resolve_encoding_name(model_id: str) -> str:
    """Pick the legacy encoding for older GPT generations, o200k otherwise."""
    lowered = model_id.lower()
    if any(x in lowered for x in ("gpt-4-", "gpt-3.5", "legacy")):
        return LEGACY_ENCODING
    return DEFAULT_ENCODING


def _load_encoding(name: str) -> Any:
    with _CACHE_LOCK:
        if name not in _ENCODING_CACHE:
            try:
                _ENCODING_CACHE[name] = tiktoken.get_encoding(name)
            except ValueError:
                _ENCODING_CACHE[name] = tiktoken.get_encoding(LEGACY_ENCODING)
        return _ENCODING_CACHE[name]


# -----------------------------------------------------------------------------
# SERVICE
# -----------------------------------------------------------------------------

class TokenizerService:
    """
    Routes counting to tiktoken and degrades to the heuristic on failure.

    Once tiktoken has failed the service stays on the heuristic, so a
    missing encoding is reported once rather than for every file.
    """

    def __init__(self) -> None:
        self.heuristic = HeuristicStrategy()
        self.precise = TiktokenStrategy()
        self._precise_ok = True
        self._lock = threading.Lock()

    def count(self, text: str, model: str = DEFAULT_MODEL) -> int:
        """
        Count tokens for the given model.

        Args:
            text: Raw input text.
            model: Target model identifier.

        Returns:
            int: Precise or estimated token count.
        """
        if not text:
            return 0

        with self._lock:
            use_precise = self._precise_ok

        if use_precise:
            try:
                return self.precise.count(text, model)
            except Exception as e:
                logger.warning(f"tiktoken counting failed: {e}. Using heuristic fallback.")
                with self._lock:
                    self._precise_ok = False

        return self.heuristic.count(text, model)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

_SERVICE_INSTANCE = TokenizerService()


def count_tokens(text: str, model: str = DEFAULT_MODEL) -> int:
    """
    Estimate the number of tokens of text for the target model.

    Args:
        text: Input string content.
        model: Target model name.

    Returns:
        int: Token count.
    """
    return _SERVICE_INSTANCE.count(text, model)
