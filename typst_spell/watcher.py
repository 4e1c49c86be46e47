"""Polling file watcher used by ``typst-spell watch``."""

import time
from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger


class FileWatcher:
    """Detects created and modified files by polling modification times.

    Attributes:
        root: File or directory to watch (directories recursively)
        delay: Seconds between two polls
        extra_files: Files watched in addition to ``root``
    """

    def __init__(self, root: Path, delay: float, extra_files: Iterable[Path] = ()):
        """Initialize the watcher and take the first snapshot.

        Raises:
            ValueError: If delay is not positive
        """
        if delay <= 0:
            msg = "delay must be positive"
            logger.error(msg)
            raise ValueError(msg)

        self.root = root.resolve()
        self.delay = delay
        self.extra_files = [path.resolve() for path in extra_files]
        self._snapshot = self.snapshot()
        logger.debug(f"Watching {self.root} ({len(self._snapshot)} files)")

    def snapshot(self) -> dict[Path, int]:
        """Return the modification time of every watched file."""
        if self.root.is_dir():
            candidates = [path for path in self.root.rglob("*") if path.is_file()]
        else:
            candidates = [self.root]
        candidates.extend(self.extra_files)

        mtimes = {}
        for path in candidates:
            try:
                mtimes[path] = path.stat().st_mtime_ns
            except FileNotFoundError:
                # Deleted between listing and stat
                continue
        return mtimes

    def poll(self) -> list[Path]:
        """Return files created or modified since the previous poll, sorted."""
        current = self.snapshot()
        changed = sorted(
            path for path, mtime in current.items() if self._snapshot.get(path) != mtime
        )
        self._snapshot = current
        return changed

    def watch(self) -> Iterator[list[Path]]:
        """Yield each non-empty batch of changed files, forever."""
        while True:
            time.sleep(self.delay)
            changed = self.poll()
            if changed:
                logger.debug(f"Detected {len(changed)} changed file(s)")
                yield changed
