"""Scheduler: discovers sample files, shards them across workers, runs the workers."""

import logging
import os
import threading

from loggen.config import Config, resolve_parallelism
from loggen.discovery import iter_sample_files, mirror_path
from loggen.replay_unit import ReplayUnit
from loggen.worker import ReplayWorker

logger = logging.getLogger(__name__)


class SetupError(Exception):
    """Raised when the replay run can't be built; no worker has started."""


def build_partitions(
    input_dir: str,
    output_dir: str,
    workers: int,
    sort_paths: bool = True,
) -> list[list[ReplayUnit]]:
    """Open a ReplayUnit per sample file and deal them into ``workers`` partitions.

    The n-th discovered file goes to partition ``n % workers``: plain
    round-robin by discovery order, not balanced by size. Some partitions stay
    empty when there are fewer files than workers. Any failure closes the
    units opened so far and raises SetupError.
    """
    if workers < 1:
        raise SetupError(f"Worker count must be at least 1, got {workers}")
    if not os.path.isdir(input_dir):
        raise SetupError(f"Input base directory {input_dir} is not a directory")

    partitions: list[list[ReplayUnit]] = [[] for _ in range(workers)]
    counter = 0
    try:
        for path_in in iter_sample_files(input_dir, sort_paths=sort_paths, exclude_dir=output_dir):
            path_out = mirror_path(path_in, input_dir, output_dir)
            os.makedirs(os.path.dirname(path_out) or ".", exist_ok=True)
            partitions[counter % workers].append(ReplayUnit(path_in, path_out))
            counter += 1
    except OSError as e:
        for partition in partitions:
            for unit in partition:
                unit.close()
        raise SetupError(f"Failed to set up replay of {input_dir}: {e}") from e

    logger.debug("Discovered %d sample file(s) under %s", counter, input_dir)
    return partitions


class Scheduler:
    """Builds the partitions for a Config and owns the resulting worker threads."""

    def __init__(self, config: Config, stop_event: threading.Event | None = None):
        self._config = config
        self._stop_event = stop_event or threading.Event()
        self._workers: list[ReplayWorker] = []

    @property
    def workers(self) -> list[ReplayWorker]:
        return list(self._workers)

    @property
    def stop_event(self) -> threading.Event:
        return self._stop_event

    def start(self) -> list[ReplayWorker]:
        """Build partitions and start one worker per non-empty partition.

        Raises SetupError before any thread starts if the run can't be built.
        """
        cfg = self._config
        count = resolve_parallelism(cfg)
        strategy = cfg.wrap_strategy
        logger.info(
            "%s -> %s (threads: %d, interval: %dms, strategy: %s)",
            cfg.in_base_dir, cfg.out_base_dir, count, cfg.interval_ms, strategy.value,
        )

        partitions = build_partitions(
            cfg.in_base_dir, cfg.out_base_dir, count, sort_paths=cfg.sort_paths,
        )
        for idx, units in enumerate(partitions):
            if not units:
                continue
            self._workers.append(ReplayWorker(
                units,
                cfg.interval_seconds,
                strategy,
                stop_event=self._stop_event,
                name=f"replay-worker-{idx}",
            ))

        total = sum(len(p) for p in partitions)
        if not self._workers:
            logger.warning("No sample files found under %s, nothing to replay", cfg.in_base_dir)
        else:
            logger.info("Replaying %d file(s) on %d worker(s)", total, len(self._workers))

        for worker in self._workers:
            worker.start()
        return self.workers

    def wait(self, poll_interval: float = 0.5) -> list[ReplayWorker]:
        """Block until every worker has exited. Returns the workers that crashed.

        Joins with a timeout so the calling thread stays responsive to signals.
        """
        pending = list(self._workers)
        while pending:
            for worker in pending:
                worker.join(timeout=poll_interval)
            pending = [w for w in pending if w.is_alive()]

        failed = [w for w in self._workers if w.error is not None]
        for worker in failed:
            logger.error("Error in %s: %r", worker.name, worker.error)
        return failed

    def stop(self, timeout: float = 5.0):
        """Ask all workers to finish their current turn and exit."""
        self._stop_event.set()
        for worker in self._workers:
            worker.join(timeout=timeout)
