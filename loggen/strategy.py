"""Wrap strategies — what happens to an output file when its sample runs out."""

import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)

ROTATED_SUFFIX = ".rotated"


class WrapStrategy(Enum):
    TRUNCATE = "truncate"
    APPEND = "append"
    ROTATE = "rotate"

    @classmethod
    def parse(cls, value: str) -> "WrapStrategy":
        """Look up a strategy by name, case-insensitively."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown wrap strategy '{value}'. Choose one of: {choices}")


def rotated_path(output_path: str) -> str:
    # Suffix is appended, extension kept: app.log -> app.log.rotated, so
    # app.log and app.txt in one directory never share a rotated file.
    return output_path + ROTATED_SUFFIX


def apply_wrap(unit, strategy: WrapStrategy) -> bool:
    """Move a unit past end-of-input and rewind its read cursor.

    APPEND leaves the output alone. TRUNCATE reopens the output empty.
    ROTATE renames the output to ``<output>.rotated`` (replacing any earlier
    rotation) and opens a fresh file in its place.

    Filesystem errors are logged, never raised. The cursor is rewound either
    way so a failing unit keeps cycling instead of stalling at EOF. Returns
    True when the transition itself succeeded.
    """
    ok = True
    try:
        if strategy is WrapStrategy.TRUNCATE:
            # Truncate, then keep writing in append mode like every other handle.
            open(unit.output_path, "wb").close()
            unit.replace_writer("ab")
        elif strategy is WrapStrategy.ROTATE:
            target = rotated_path(unit.output_path)
            os.replace(unit.output_path, target)
            unit.replace_writer("ab")
            logger.debug("Rotated %s -> %s", unit.output_path, target)
    except OSError as e:
        ok = False
        logger.error("Wrap (%s) failed for %s: %s", strategy.value, unit.output_path, e)
    finally:
        unit.rewind()
    return ok
