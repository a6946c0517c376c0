"""RegionLoader — one-shot asynchronous load of the region dataset.

Reads a GeoJSON file, parses it, runs the distance-based simplification and
hands the result to a completion callback.  Simplification runs synchronously
on the event loop: it is the only CPU-bound step and must finish before any
shape is bound.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

from loguru import logger

from engine.regions.geojson import read_regions
from engine.regions.region import RegionCollection, simplify_regions


def load_regions(path: str | Path, min_distance_km: float | None = None) -> RegionCollection:
    """Read a region file and optionally simplify it.  Synchronous."""
    collection = read_regions(path)
    if min_distance_km is None or min_distance_km <= 0:
        return collection

    simplified, stats = simplify_regions(collection, min_distance_km)
    logger.info(
        f"Simplified {stats.features} regions at {min_distance_km} km: "
        f"{stats.vertices_before} -> {stats.vertices_after} vertices "
        f"({stats.ratio:.0%} kept)"
    )
    return simplified


class RegionLoader:
    """Deferred, cancellable, single-use region load.

    Args:
        path: GeoJSON file to read.
        min_distance_km: Simplification threshold; ``None`` or <= 0 disables it.
        delay: Seconds to wait before loading.
    """

    def __init__(
        self,
        path: str | Path,
        min_distance_km: float | None = None,
        delay: float = 0.0,
    ) -> None:
        self.path = Path(path)
        self.min_distance_km = min_distance_km
        self.delay = delay
        self._task: asyncio.Task | None = None
        self.result: RegionCollection | None = None
        self.error: BaseException | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def start(self, on_ready: Callable[[RegionCollection], None]) -> asyncio.Task:
        """Schedule the load on the running event loop.

        Raises:
            RuntimeError: If the loader was already started.
        """
        if self._task is not None:
            raise RuntimeError("RegionLoader can only be started once")
        self._task = asyncio.get_running_loop().create_task(self._run(on_ready))
        return self._task

    def cancel(self) -> bool:
        """Cancel a pending load.  Returns True if something was cancelled."""
        if self._task is None or self._task.done():
            return False
        self._task.cancel()
        return True

    async def _run(self, on_ready: Callable[[RegionCollection], None]) -> RegionCollection:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        try:
            collection = load_regions(self.path, self.min_distance_km)
        except OSError as e:
            self.error = e
            logger.warning(f"Region data could not be read from {self.path}: {e}")
            raise
        self.result = collection
        logger.info(f"Loaded {len(collection)} regions from {self.path}")
        on_ready(collection)
        return collection
