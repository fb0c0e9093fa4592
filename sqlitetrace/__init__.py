"""sqlitetrace Package.

A demonstration of SQLite's trace hook and of a transaction wrapper, built on a small
SQLite driver that reports trace events through a callback.

Key pieces of sqlitetrace include:

-   **Trace Masks**: `TraceMaskConfig` selects the reported event categories and converts
    between the short form (`"spr"`), the long flag form, and the numeric mask.
-   **Trace Events**: `TraceEvent` describes one notification, `format_trace_event`
    renders it as a single line.
-   **Tracing Driver**: `SQLiteDriver` runs statements directly, prepared, or inside a
    `SQLiteTransaction` and reports the events enabled in its `TraceConfig`.
-   **Transaction Wrapper**: `tx_wrap` runs a unit of work in a transaction and commits or
    rolls back, returning a `TransactionOutcome`.

Note:
This `__init__.py` file uses a custom `__getattr__` to enable lazy loading of
submodules and specific symbols, so importing one module doesn't drag in the driver.
"""
import importlib
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlitetrace.drivers import SQLiteDriver, SQLiteTransaction, TraceConfig
    from sqlitetrace.results import ROLLBACK_REQUESTED, TransactionOutcome, WorkResult
    from sqlitetrace.trace_events import TraceEvent, format_trace_event
    from sqlitetrace.trace_mask import TraceEventCode, TraceMaskConfig
    from sqlitetrace.tx_wrap import tx_wrap

__lookup = {
    "SQLiteDriver": "sqlitetrace.drivers",
    "SQLiteTransaction": "sqlitetrace.drivers",
    "TraceConfig": "sqlitetrace.drivers",
    "ROLLBACK_REQUESTED": "sqlitetrace.results",
    "TransactionOutcome": "sqlitetrace.results",
    "WorkResult": "sqlitetrace.results",
    "TraceEvent": "sqlitetrace.trace_events",
    "format_trace_event": "sqlitetrace.trace_events",
    "TraceEventCode": "sqlitetrace.trace_mask",
    "TraceMaskConfig": "sqlitetrace.trace_mask",
    "tx_wrap": "sqlitetrace.tx_wrap",
}

__all__ = list(__lookup.keys())

__modules = set()

for _path in Path(__file__).parent.iterdir():
    if _path.name.startswith("_"):
        continue

    if not _path.is_dir() and _path.suffix != ".py":
        continue

    __modules.add(_path.stem)


def __getattr__(name):
    """Lazily loads the symbols listed in `__lookup` and the package's submodules.

    Raises:
        ImportError: If a symbol listed in `__lookup` cannot be imported from its module.
        AttributeError: If the name is neither a known symbol nor a submodule.
    """
    if name in __lookup:
        try:
            module = importlib.import_module(__lookup[name])
        except Exception as e:
            raise ImportError(f"Failed to import {name} from {__lookup[name]}: {e}") from e

        return getattr(module, name)

    if name in __modules:
        return importlib.import_module(f"sqlitetrace.{name}")

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
