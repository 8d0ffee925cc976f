from __future__ import annotations

from .errors import RunCancelledError


class CancellationToken:
    """
    Cooperative cancellation flag for one run.

    The owner calls cancel() (e.g. because the input changed); the run checks
    the flag at every file boundary and aborts with RunCancelledError.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, stage: str = "") -> None:
        if self._cancelled:
            raise RunCancelledError(stage)


__all__ = ["CancellationToken"]
