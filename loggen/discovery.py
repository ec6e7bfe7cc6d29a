"""Input tree discovery and output path mirroring."""

import logging
import os
from typing import Iterator

logger = logging.getLogger(__name__)


def _is_within(path: str, root: str) -> bool:
    try:
        return os.path.commonpath([path, root]) == root
    except ValueError:
        return False


def iter_sample_files(input_dir: str, sort_paths: bool = True, exclude_dir: str | None = None) -> Iterator[str]:
    """Yield every regular file under input_dir.

    With sort_paths the walk is deterministic (directories and files in name
    order); otherwise the order is whatever os.walk returns. exclude_dir, if it
    sits inside input_dir, is pruned so an output tree nested in the input tree
    is never replayed into itself.
    """
    root = os.path.abspath(input_dir)
    excluded = os.path.abspath(exclude_dir) if exclude_dir else None
    if excluded is not None and not _is_within(excluded, root):
        excluded = None

    def _on_error(err: OSError):
        logger.warning("Skipping unreadable path %s: %s", err.filename, err)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        if excluded is not None:
            dirnames[:] = [
                d for d in dirnames if not _is_within(os.path.join(dirpath, d), excluded)
            ]
        if sort_paths:
            dirnames.sort()
            filenames = sorted(filenames)
        for name in filenames:
            path = os.path.join(dirpath, name)
            if os.path.isfile(path):
                yield path


def mirror_path(input_path: str, input_dir: str, output_dir: str) -> str:
    """Map a file under input_dir to the same relative location under output_dir."""
    rel = os.path.relpath(os.path.abspath(input_path), os.path.abspath(input_dir))
    return os.path.join(output_dir, rel)
