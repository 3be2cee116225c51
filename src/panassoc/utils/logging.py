"""Logging utilities for panassoc.

loguru console/file configuration and the sectioned run log written next to
the results.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

import panassoc

if TYPE_CHECKING:
    from panassoc.core.config import OutputConfig


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure loguru for panassoc.

    Console logging at INFO (DEBUG if verbose) on stdout, plus an optional
    DEBUG-level file sink with JSON serialization.

    Args:
        verbose: If True, set console logging to DEBUG level.
        log_file: Optional path to a JSON log file.
    """
    logger.remove()

    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stdout,
        level=level,
        format="{time:HH:mm:ss} | <level>{level: <8}</level> | {message}",
        colorize=True,
    )

    if log_file:
        logger.add(
            log_file,
            serialize=True,
            level="DEBUG",
        )


def _write_section(f, title: str, items: dict) -> None:
    f.write(f"[{title}]\n")
    for key, value in items.items():
        f.write(f"{key} = {value}\n")
    f.write("\n")


def write_run_log(
    output_config: "OutputConfig",
    command_line: str,
    run: dict,
    outputs: dict[str, Path],
    timing: dict[str, float],
) -> Path:
    """Write the run log for one CLI command.

    The header records the version, start time and command. The body holds a
    ``[run]`` section of input sizes, settings and fit outcome counts, an
    ``[outputs]`` section naming each file the command wrote, and ``[timing]``
    durations in seconds.

    Args:
        output_config: Output directory and prefix; the log goes to log_path.
        command_line: The command line used to invoke the program.
        run: Input sizes, settings and fit outcome counts.
        outputs: Result files written by the command, keyed by kind.
        timing: Durations in seconds, keyed by phase name.

    Returns:
        Path to the written log file.

    Example output:
        # panassoc 0.1.0
        # date: 2026-01-31T10:30:00
        # command: panassoc assoc -k kmers.txt -p pheno.txt

        [run]
        n_samples = 96
        n_tested = 12001

        [outputs]
        assoc = output/result.assoc.txt

        [timing]
        total = 1.23
    """
    output_config.ensure_outdir()
    log_path = output_config.log_path

    with open(log_path, "w") as f:
        f.write(f"# panassoc {panassoc.__version__}\n")
        f.write(f"# date: {datetime.now().isoformat(timespec='seconds')}\n")
        f.write(f"# command: {command_line}\n\n")
        _write_section(f, "run", run)
        _write_section(f, "outputs", {kind: str(path) for kind, path in outputs.items()})
        _write_section(f, "timing", {phase: f"{secs:.2f}" for phase, secs in timing.items()})

    logger.debug(f"Run log written to {log_path}")
    return log_path
