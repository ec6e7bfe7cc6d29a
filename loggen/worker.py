"""ReplayWorker: thread that visits its replay units round-robin at a fixed cadence."""

import logging
import threading

from loggen.replay_unit import ReplayUnit, TurnOutcome
from loggen.strategy import WrapStrategy

logger = logging.getLogger(__name__)


class ReplayWorker(threading.Thread):
    """Runs turns over a fixed, ordered list of units: A, B, C, A, B, C, ...

    After every turn, whatever its outcome, the worker waits ``interval``
    seconds before moving on to the next unit. The wait is on ``stop_event``
    so a shutdown request interrupts it; otherwise the loop never ends.
    ``max_turns`` bounds the loop and is meant for tests.
    """

    def __init__(
        self,
        units: list[ReplayUnit],
        interval: float,
        strategy: WrapStrategy,
        stop_event: threading.Event | None = None,
        name: str | None = None,
        max_turns: int | None = None,
    ):
        super().__init__(name=name, daemon=True)
        if not units:
            raise ValueError("ReplayWorker needs at least one unit")
        self._units = list(units)
        self._interval = interval
        self._strategy = strategy
        self._stop_event = stop_event or threading.Event()
        self._max_turns = max_turns
        self._position = 0
        self._turns = 0
        self._error: BaseException | None = None

    @property
    def units(self) -> list[ReplayUnit]:
        return list(self._units)

    @property
    def turns(self) -> int:
        return self._turns

    @property
    def error(self) -> BaseException | None:
        return self._error

    def step(self) -> TurnOutcome:
        """Take one turn on the next unit in order, without waiting."""
        unit = self._units[self._position]
        outcome = unit.take_turn(self._strategy)
        self._position = (self._position + 1) % len(self._units)
        self._turns += 1
        return outcome

    def _limit_reached(self) -> bool:
        return self._max_turns is not None and self._turns >= self._max_turns

    def run(self):
        logger.info(
            "%s started: %d unit(s), interval %.3fs, strategy %s",
            self.name, len(self._units), self._interval, self._strategy.value,
        )
        try:
            while not self._stop_event.is_set():
                self.step()
                if self._limit_reached():
                    break
                self._stop_event.wait(self._interval)
        except Exception as e:
            self._error = e
            logger.error("%s crashed after %d turn(s): %s", self.name, self._turns, e, exc_info=True)
        finally:
            self.close_units()
            logger.info("%s stopped after %d turn(s)", self.name, self._turns)

    def stop(self):
        self._stop_event.set()

    def close_units(self):
        for unit in self._units:
            unit.close()
