"""ReplayUnit: one sample file replayed line by line into one output file."""

import logging
from dataclasses import dataclass
from enum import Enum

from loggen.strategy import WrapStrategy, apply_wrap

logger = logging.getLogger(__name__)


class ReadKind(Enum):
    LINE = "line"
    END_OF_INPUT = "end_of_input"
    ERROR = "error"


class TurnOutcome(Enum):
    EMITTED = "emitted"
    WRAPPED = "wrapped"
    ERROR = "error"


@dataclass(frozen=True)
class ReadResult:
    kind: ReadKind
    data: bytes = b""
    error: Exception | None = None


class ReplayUnit:
    """Owns the read cursor on a sample file and the write handle on its output.

    Bytes are copied verbatim (binary mode), one line per turn, and flushed
    after every line so downstream tailers see whole lines as they land.
    Not thread-safe: a unit belongs to exactly one worker.
    """

    def __init__(self, input_path: str, output_path: str):
        self.input_path = input_path
        self.output_path = output_path
        self._reader = open(input_path, "rb")
        try:
            self._writer = open(output_path, "ab")
        except OSError:
            self._reader.close()
            raise

    def __repr__(self) -> str:
        return f"ReplayUnit({self.input_path!r} -> {self.output_path!r})"

    @property
    def position(self) -> int:
        return self._reader.tell()

    def read_next_line(self) -> ReadResult:
        """Read one line, terminator included. Errors leave the cursor where it was."""
        try:
            data = self._reader.readline()
        except (OSError, ValueError) as e:
            logger.error("Error reading %s: %s", self.input_path, e)
            return ReadResult(ReadKind.ERROR, error=e)
        if not data:
            return ReadResult(ReadKind.END_OF_INPUT)
        return ReadResult(ReadKind.LINE, data=data)

    def emit(self, data: bytes) -> bool:
        try:
            self._writer.write(data)
            self._writer.flush()
        except (OSError, ValueError) as e:
            logger.error("Error writing %s: %s", self.output_path, e)
            return False
        return True

    def handle_exhaustion(self, strategy: WrapStrategy) -> bool:
        return apply_wrap(self, strategy)

    def take_turn(self, strategy: WrapStrategy) -> TurnOutcome:
        """One read-and-react cycle: emit a line, wrap at EOF, or report."""
        result = self.read_next_line()
        if result.kind is ReadKind.LINE:
            if self.emit(result.data):
                return TurnOutcome.EMITTED
            return TurnOutcome.ERROR
        if result.kind is ReadKind.END_OF_INPUT:
            self.handle_exhaustion(strategy)
            return TurnOutcome.WRAPPED
        return TurnOutcome.ERROR

    def rewind(self):
        try:
            self._reader.seek(0)
        except (OSError, ValueError) as e:
            logger.error("Error rewinding %s: %s", self.input_path, e)

    def replace_writer(self, mode: str):
        """Open a new handle on the output path and swap it in.

        The old handle is only dropped once the new one is open, so a failed
        open leaves the unit writing where it was.
        """
        new_writer = open(self.output_path, mode)
        old_writer, self._writer = self._writer, new_writer
        try:
            old_writer.close()
        except OSError as e:
            logger.warning("Error closing previous handle for %s: %s", self.output_path, e)

    def close(self):
        for fh in (self._reader, self._writer):
            try:
                fh.close()
            except OSError as e:
                logger.warning("Error closing %s: %s", fh.name, e)
