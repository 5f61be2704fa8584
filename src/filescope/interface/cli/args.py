from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the filescope CLI and translates parsed
arguments into option overrides and scanner settings.
"""

import argparse
from typing import Any, Dict, List, Optional

from filescope.core.analysis.remote import DEFAULT_ENDPOINT, DEFAULT_REMOTE_MODEL
from filescope.core.services.scanner import DEFAULT_MAX_DEPTH

ANALYZER_CHOICES = ("heuristic", "remote")

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the filescope CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="filescope",
        description="Analyze the files of a project with bounded concurrency and retries.",
    )

    # --- Input & Configuration Sources ---
    p.add_argument(
        "-i", "--input",
        dest="input_path",
        default=None,
        help="Project directory to analyze (default: current directory).",
    )
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="JSON options file (default: the user options file, if present).",
    )

    # --- Concurrency & Batching ---
    p.add_argument("--concurrency", dest="concurrent_limit", type=int, default=None,
                   help="Maximum simultaneous analyze calls.")
    p.add_argument("--batch-size", dest="batch_size", type=int, default=None,
                   help="Maximum files per batch.")
    p.add_argument("--max-batch-bytes", dest="max_batch_bytes", type=int, default=None,
                   help="Maximum cumulative bytes per batch.")
    p.add_argument("--max-file-size", dest="max_file_size", type=int, default=None,
                   help="Files larger than this many bytes are skipped.")
    p.add_argument("--batch-delay", dest="batch_delay_ms", type=int, default=None,
                   help="Pause between batches in milliseconds.")

    # --- Retry Policy ---
    p.add_argument("--retries", dest="max_retries", type=int, default=None,
                   help="Retry attempts after the first failure.")
    p.add_argument("--retry-delay", dest="retry_delay_ms", type=int, default=None,
                   help="Base backoff delay in milliseconds (doubles per attempt).")

    # --- Reporting ---
    p.add_argument("--no-progress", action="store_true", help="Do not log progress notifications.")
    p.add_argument("--perf", action="store_true", help="Log the final performance report.")

    # --- Discovery Filters ---
    p.add_argument("--no-gitignore", action="store_true", help="Ignore local .gitignore rules.")
    p.add_argument("--exclude", dest="exclude_patterns", default=None,
                   help="Comma-separated regexes replacing the default exclusions.")
    p.add_argument("--ext", dest="extensions", default=None,
                   help="Comma-separated extension whitelist (e.g. .py,.ts).")
    p.add_argument("--max-depth", dest="max_depth", type=int, default=DEFAULT_MAX_DEPTH,
                   help="Deepest directory level to scan.")

    # --- Analyzer Selection ---
    p.add_argument("--analyzer", choices=ANALYZER_CHOICES, default="heuristic",
                   help="Analyzer used for every file.")
    p.add_argument("--endpoint", default=DEFAULT_ENDPOINT,
                   help="Chat-completions base URL for the remote analyzer.")
    p.add_argument("--model", default=DEFAULT_REMOTE_MODEL,
                   help="Model identifier for the remote analyzer.")

    # --- Output & Diagnostics ---
    p.add_argument("--json", dest="json_output", action="store_true", help="Print the report as JSON.")
    p.add_argument("--strict", action="store_true", help="Exit with status 1 if any file failed.")
    p.add_argument("--dump-config", action="store_true", help="Print the effective options and exit.")
    p.add_argument("--debug", action="store_true", help="Elevate logging verbosity to DEBUG.")
    p.add_argument("--log-file", dest="log_file", default=None, help="Also write logs to this file.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

_OPTION_FLAGS = (
    "concurrent_limit",
    "batch_size",
    "max_batch_bytes",
    "max_file_size",
    "max_retries",
    "retry_delay_ms",
    "batch_delay_ms",
)


def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate parsed arguments into AnalysisOptions overrides.

    Only flags the user actually passed are returned, so they win over the
    options file without masking it for the rest.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Option overrides.
    """
    overrides: Dict[str, Any] = {}

    for key in _OPTION_FLAGS:
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value

    if args.no_progress:
        overrides["enable_progress"] = False
    if args.perf:
        overrides["enable_performance_monitoring"] = True

    return overrides


def args_to_scan_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """Keyword arguments for build_project_tree()."""
    return {
        "exclude_patterns": _split_csv(args.exclude_patterns),
        "respect_gitignore": not args.no_gitignore,
        "max_depth": args.max_depth,
        "extensions": _split_csv(args.extensions),
    }

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
