"""sqlitetrace.config

Settings for one run of the demo program, built once from the command line and read-only afterwards.
"""

import argparse
from dataclasses import dataclass, field

from sqlitetrace.trace_mask import TraceMaskConfig, mask_from_args


DEFAULT_ROW_COUNT = 4


@dataclass(frozen=True)
class DemoSettings:
    """Demo run settings."""

    db_filename: str
    search_pattern: str = ""
    row_count: int = DEFAULT_ROW_COUNT  # rows generated by each approach
    rollback_always: bool = False  # roll back transactions instead of committing
    trace_mask: TraceMaskConfig = field(default_factory=TraceMaskConfig)

    # Logging
    log_level: str = "INFO"
    log_dir: str | None = None

    @staticmethod
    def from_args(namespace: argparse.Namespace) -> "DemoSettings":
        return DemoSettings(
            db_filename=namespace.db,
            search_pattern=namespace.search_pat,
            row_count=namespace.nrows,
            rollback_always=namespace.rollback,
            trace_mask=mask_from_args(namespace),
            log_level=namespace.log_level.upper(),
            log_dir=namespace.log_dir,
        )
