"""Cooperative cancellation token passed through handler chains."""
from __future__ import annotations

import asyncio
import threading
from typing import Callable, List, Optional


class CancellationToken:
    """Flag observed by handlers; cancelling never interrupts a running handler."""

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        callback()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError("Operation was cancelled")


def raise_if_cancelled(cancellation: Optional[CancellationToken]) -> None:
    if cancellation is not None:
        cancellation.raise_if_cancelled()
