"""Background execution of the grid-search fit.

The fit costs (grid size x integration steps) model runs, so interactive
callers submit it to a worker thread and poll or wait on the future.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from rshield.analysis.fitting import FitGrid, FitResult, ProgressCallback, grid_search
from rshield.types.parameters import SimulationParameters
from rshield.types.series import ObservedSeries

logger = logging.getLogger(__name__)


class FitJob:
    """A cancellable auto-fit running on its own worker thread.

    Usage:
        with FitJob(params, observed) as job:
            future = job.submit()
            ...
            result = future.result()
    """

    def __init__(
        self,
        params: SimulationParameters,
        observed: ObservedSeries,
        grid: FitGrid | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.params = params
        self.observed = observed
        self.grid = grid if grid is not None else FitGrid()
        self.on_progress = on_progress
        self.progress: tuple[int, int] = (0, self.grid.size)
        self._cancel = threading.Event()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rshield-fit")
        self._future: Future[FitResult] | None = None

    def submit(self) -> Future[FitResult]:
        """Start the search; a job runs at most once."""
        if self._future is not None:
            raise RuntimeError("FitJob already submitted")
        self._future = self._executor.submit(self._run)
        return self._future

    def _run(self) -> FitResult:
        return grid_search(
            self.params,
            self.observed,
            self.grid,
            progress=self._report,
            cancel=self._cancel,
        )

    def _report(self, done: int, total: int) -> None:
        self.progress = (done, total)
        if self.on_progress is not None:
            self.on_progress(done, total)

    def cancel(self) -> None:
        """Ask the search to stop; its future raises FitCancelledError.

        The future itself is left to the worker, so a search cancelled before
        it starts still ends with FitCancelledError.
        """
        logger.info("Cancelling auto-fit job")
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> FitJob:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if exc_info[0] is not None:
            self.cancel()
        self.shutdown()
