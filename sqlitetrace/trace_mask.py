"""Translates command-line flags into a SQLite trace event mask.

A `TraceMaskConfig` selects which trace event categories a connection reports. It can be
built from four separate boolean flags (the long form, `--trace-stmt --trace-row`), from a
single string of event letters (the short form, `sr`), or from a numeric mask, and it can
be rendered back into each of those forms for diagnostic echo.

The short form recognizes these letters:

-   `s`: Statement begins running (`TraceEventCode.STMT`)
-   `p`: Statement finished, with its run time (`TraceEventCode.PROFILE`)
-   `r`: Statement produced a row (`TraceEventCode.ROW`)
-   `c`: Database connection closed (`TraceEventCode.CLOSE`)

Any other character is ignored, so decoding never fails.

Example:
    ```python
    config = decode_mask_string("sp")
    to_long_flags(config)  # "--trace-stmt --trace-profile"
    event_mask(config)     # TraceEventCode.STMT | TraceEventCode.PROFILE
    ```
"""
import argparse
from dataclasses import dataclass, fields, replace
from enum import IntFlag


class TraceEventCode(IntFlag):
    """Trace event categories, using the bit values of SQLite's `SQLITE_TRACE_*` constants."""
    STMT = 0x01
    PROFILE = 0x02
    ROW = 0x04
    CLOSE = 0x08


STMT_ARG = "trace-stmt"
PROFILE_ARG = "trace-profile"
ROW_ARG = "trace-row"
CLOSE_ARG = "trace-close"
MASK_ARG = "trace-mask"


@dataclass(frozen=True)
class TraceMaskConfig:
    """Opt-in subscriptions to each trace event category.

    Attributes:
        stmt: Report statements as they begin running.
        profile: Report statements as they finish, with their run time.
        row: Report each row a statement produces.
        close: Report the database connection closing.
    """
    stmt: bool = False
    profile: bool = False
    row: bool = False
    close: bool = False

    def union(self, other: "TraceMaskConfig") -> "TraceMaskConfig":
        """Returns a config with every flag that is enabled in either config."""
        return TraceMaskConfig(
            **{field.name: getattr(self, field.name) or getattr(other, field.name) for field in fields(self)}
        )


# Fixed ordering shared by every rendering: (config field, short letter, long flag, event bit)
_CATEGORIES = (
    ("stmt", "s", STMT_ARG, TraceEventCode.STMT),
    ("profile", "p", PROFILE_ARG, TraceEventCode.PROFILE),
    ("row", "r", ROW_ARG, TraceEventCode.ROW),
    ("close", "c", CLOSE_ARG, TraceEventCode.CLOSE),
)

_LETTERS = {letter: name for name, letter, _, _ in _CATEGORIES}
_LONG_FLAGS = {f"--{flag}": name for name, _, flag, _ in _CATEGORIES}


def event_mask(config: TraceMaskConfig) -> TraceEventCode:
    """Encodes the config as the bitwise union of the event bits of its enabled flags."""
    mask = TraceEventCode(0)
    for name, _, _, bit in _CATEGORIES:
        if getattr(config, name):
            mask |= bit

    return mask


def from_event_mask(mask: int) -> TraceMaskConfig:
    """Decodes a numeric event mask. Bits that don't belong to a known category are ignored."""
    return TraceMaskConfig(**{name: bool(mask & bit) for name, _, _, bit in _CATEGORIES})


def decode_mask_string(text: str, base: TraceMaskConfig | None = None) -> TraceMaskConfig:
    """Enables the flag for each recognized letter in `text`.

    Flags already enabled on `base` stay enabled, so the result is the union of `base` and
    the letters found. Unrecognized characters are skipped.

    Args:
        text: Short form mask such as `"spr"`.
        base: Config to start from, defaults to every flag disabled.

    Returns:
        A new config, `base` is never modified.
    """
    enabled = {_LETTERS[char]: True for char in text if char in _LETTERS}
    return replace(base or TraceMaskConfig(), **enabled)


def decode_long_flags(text: str, base: TraceMaskConfig | None = None) -> TraceMaskConfig:
    """Parses the long form produced by `to_long_flags`, ignoring unknown words."""
    enabled = {_LONG_FLAGS[word]: True for word in text.split() if word in _LONG_FLAGS}
    return replace(base or TraceMaskConfig(), **enabled)


def to_short_string(config: TraceMaskConfig) -> str:
    return "".join(letter for name, letter, _, _ in _CATEGORIES if getattr(config, name))


def to_long_flags(config: TraceMaskConfig) -> str:
    return " ".join(f"--{flag}" for name, _, flag, _ in _CATEGORIES if getattr(config, name))


# ---------------------------------------- #
# Argument Parsing                         #
# ---------------------------------------- #
def add_mask_arguments(parser: argparse.ArgumentParser):
    """Registers the separate boolean trace flags and the combined short form flag.

    The help texts follow the SQLite documentation for `sqlite3_trace_v2()`.
    """
    group = parser.add_argument_group("trace events")
    group.add_argument(
        f"--{STMT_ARG}",
        action="store_true",
        help="Event: statement first begins running, possibly the start of each trigger subprogram",
    )
    group.add_argument(
        f"--{PROFILE_ARG}",
        action="store_true",
        help="Event: statement finishes, gives estimated number of nanoseconds it took to run",
    )
    group.add_argument(
        f"--{ROW_ARG}",
        action="store_true",
        help="Event: a statement generates a single row of result",
    )
    group.add_argument(
        f"--{CLOSE_ARG}",
        action="store_true",
        help="Event: database connection closes",
    )
    group.add_argument(
        f"--{MASK_ARG}",
        default="",
        metavar="CODES",
        help="Supported SQLite trace event codes: s=Stmt, p=Profile, r=Row, c=Close",
    )


def mask_from_args(namespace: argparse.Namespace) -> TraceMaskConfig:
    """Builds the union of the boolean flags and the short form flag from parsed arguments."""
    flags = TraceMaskConfig(
        stmt=namespace.trace_stmt,
        profile=namespace.trace_profile,
        row=namespace.trace_row,
        close=namespace.trace_close,
    )
    return decode_mask_string(namespace.trace_mask, flags)
