"""Best-effort background queue for derived-cache recomputation.

Tasks run after the triggering write has committed. A failing task is logged
and dropped; the next natural recompute heals the cache.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from ..core.constants import DEFAULT_RECOMPUTE_WORKERS

log = logging.getLogger(__name__)


class RecomputeDispatcher:
    def __init__(self, *, max_workers: int = DEFAULT_RECOMPUTE_WORKERS, synchronous: bool = False):
        self._synchronous = bool(synchronous)
        self._executor: Optional[ThreadPoolExecutor] = None
        if not self._synchronous:
            self._executor = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="recompute")

    @property
    def synchronous(self) -> bool:
        return self._synchronous

    def submit(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[Future]:
        def run() -> None:
            try:
                fn(*args, **kwargs)
            except Exception:
                log.exception("Background recompute failed: %s", description)

        if self._executor is None:
            run()
            return None
        try:
            return self._executor.submit(run)
        except RuntimeError:
            # Executor already shut down (interpreter exit).
            log.warning("Recompute dropped, dispatcher is shut down: %s", description)
            return None

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
