from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, resolution of options
(defaults, options file, CLI flags), project scanning, pipeline execution
and report rendering.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from filescope.core.analysis.remote import RemoteAnalyzer
from filescope.core.pipeline.engine import AnalysisOrchestrator
from filescope.core.pipeline.stages.validator import validate_options
from filescope.core.services.registry import AnalyzerRegistry, create_default_registry
from filescope.core.services.scanner import build_project_tree
from filescope.domain.analysis_models import PipelineReport
from filescope.domain.config import load_options_file
from filescope.domain.errors import SetupError
from filescope.infra.fs import normalize_path
from filescope.infra.logging import LoggingConfig, configure_logging
from filescope.interface.cli import args as cli_args

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_SETUP_ERROR = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional rotating file)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    logger.debug("CLI execution initiated. Resolving options...")

    # 3. Options resolution: defaults < options file < CLI flags
    try:
        file_options = load_options_file(args.config_path)
        raw_options = _merge_options(file_options, cli_args.args_to_overrides(args))
        options, warnings = validate_options(raw_options, strict=False)
    except SetupError as e:
        return _fail_setup(e)

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(options.to_dict(), ensure_ascii=False, indent=2))
        return EXIT_OK

    # 4. Scan & execute
    input_path = normalize_path(args.input_path, os.getcwd())
    logger.info(f"Targeting input directory: {input_path}")

    try:
        tree = build_project_tree(input_path, **cli_args.args_to_scan_settings(args))
        registry = _build_registry(args)
        orchestrator = AnalysisOrchestrator(options, registry=registry, analyzer_name=args.analyzer)
        report = orchestrator.run(tree)
    except SetupError as e:
        return _fail_setup(e)
    except KeyboardInterrupt:
        msg = "Analysis interrupted by user."
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        msg = f"Pipeline execution failed: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_FAILURE

    # 5. Output rendering phase
    if args.json_output:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2, default=str))
    else:
        _print_human_summary(report)

    if args.strict and report.metrics.failed > 0:
        return EXIT_FAILURE
    return EXIT_OK

# -----------------------------------------------------------------------------
# WIRING HELPERS
# -----------------------------------------------------------------------------

def _merge_options(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge where non-None overrides win."""
    out = dict(base)
    for k, v in overrides.items():
        if v is not None:
            out[k] = v
    return out


def _build_registry(args: Any) -> AnalyzerRegistry:
    registry = create_default_registry()
    if args.analyzer == "remote":
        registry.register("remote", RemoteAnalyzer(endpoint=args.endpoint, model=args.model))
    return registry


def _fail_setup(error: SetupError) -> int:
    logger.error(f"Setup error: {error}")
    print(f"ERROR: {error}", file=sys.stderr)
    return EXIT_SETUP_ERROR

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(report: PipelineReport) -> None:
    """
    Print the run report as a terminal summary.

    Args:
        report: The pipeline report to render.
    """
    metrics = report.metrics
    if report.cancelled:
        status = "CANCELLED"
    elif metrics.failed > 0:
        status = "COMPLETED WITH FAILURES"
    else:
        status = "SUCCESS"
    print(f"{status}: analysis {report.state.value}")

    stats = {
        "Files processed": metrics.processed,
        "Files failed": metrics.failed,
        "Files skipped": metrics.skipped,
        "Total files": metrics.total_files,
        "Batches": report.batch_count,
    }
    for label, value in stats.items():
        print(f"{label}: {value}")
    print(f"Elapsed: {metrics.elapsed_seconds:.2f}s ({metrics.throughput_mbps:.2f} MB/s)")

    if report.results:
        print("\nResults:")
        for result in report.results:
            if result.is_failure:
                print(f"  ! {result.path}: {result.error}")
                continue
            payload = result.payload if isinstance(result.payload, dict) else {}
            kind = payload.get("type", "-")
            description = payload.get("description", "")
            print(f"  - [{kind}] {result.path} {description}".rstrip())

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
