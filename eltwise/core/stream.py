"""
Explicit execution stream handles.

A `Stream` is an ordering context bound to one JAX device. Work enqueued on it
is dispatched asynchronously by JAX; the stream keeps references to results
that may still be in flight so the caller can wait for or poll them. Results
that have completed are retired on every enqueue, and at most `max_in_flight`
results are held: enqueueing beyond that waits for the oldest one.

Faults are sticky: a failure while dispatching, or an execution failure seen
when a result is retired, is recorded on the stream, every later launch on
that stream is skipped, and the fault is reported by `Stream.synchronize()`
until `Stream.reset()` is called.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, List, Optional, TypeVar

import jax

from eltwise.eltwise import Config

logger = logging.getLogger(__name__)

T = TypeVar("T")

_stream_ids = itertools.count()


class StreamError(RuntimeError):
    """Raised by `Stream.synchronize` when work on the stream failed."""


class Stream:
    def __init__(
        self,
        device: Optional[jax.Device] = None,
        name: Optional[str] = None,
        max_in_flight: int = 64,
    ) -> None:
        if max_in_flight < 1:
            raise ValueError(f"max_in_flight must be positive, got {max_in_flight}")
        if device is None:
            device = Config().device
        if device is None:
            device = jax.devices()[0]
        self._device: jax.Device = device
        self.name: str = name if name is not None else f"stream-{next(_stream_ids)}"
        self.max_in_flight = max_in_flight
        self._pending: List[jax.Array] = []
        self._error: Optional[BaseException] = None
        logger.debug(
            "Creating %s on %s", self.name, device, extra={"stream": self.name}
        )

    @property
    def device(self) -> jax.Device:
        return self._device

    @property
    def error(self) -> Optional[BaseException]:
        """Captured fault, if any work on this stream has failed."""
        return self._error

    def enqueue(self, launch: Callable[[], T], label: str = "launch") -> Optional[T]:
        """
        Dispatch `launch` on this stream's device without waiting for it.

        Parameters
        ----------
        launch: Callable[[], T]
            Zero-argument callable that dispatches JAX work and returns the
            (possibly pending) result array
        label: str
            Name used in log records

        Returns
        -------
        Optional[T]
            The dispatched result, or None if the stream holds a fault or the
            dispatch itself failed
        """
        context = {"stream": self.name, "launch": label}
        if self._error is not None:
            logger.warning(
                "Skipping %s on %s: stream holds a fault (%s)",
                label,
                self.name,
                self._error,
                extra=context,
            )
            return None
        try:
            with jax.default_device(self._device):
                result = launch()
        except Exception as exc:
            logger.error(
                "Fault while enqueuing %s on %s",
                label,
                self.name,
                exc_info=exc,
                extra=context,
            )
            self._error = exc
            return None
        self._pending.append(result)
        logger.debug("Enqueued %s on %s", label, self.name, extra=context)
        self._retire()
        return result

    def query(self) -> bool:
        """
        Non-blocking completion check; True when no work is still in flight.

        Execution faults of results retired here are recorded on the stream
        and reported by the next `synchronize()`.
        """
        self._retire()
        return not self._pending

    def synchronize(self) -> None:
        """
        Block until all enqueued work has completed.

        Raises
        ------
        StreamError
            If any work on the stream failed, either while enqueuing or while
            executing
        """
        pending, self._pending = self._pending, []
        for result in pending:
            self._wait(result)
        if self._error is not None:
            raise StreamError(f"Work on {self.name} failed: {self._error}") from self._error

    def reset(self) -> None:
        """Clear a captured fault so the stream accepts work again."""
        self._error = None

    def _retire(self) -> None:
        # Drop completed results, then wait on the oldest ones while over the cap.
        in_flight = []
        for result in self._pending:
            if result.is_ready():
                self._wait(result)
            else:
                in_flight.append(result)
        while len(in_flight) > self.max_in_flight:
            self._wait(in_flight.pop(0))
        self._pending = in_flight

    def _wait(self, result: jax.Array) -> None:
        try:
            result.block_until_ready()
        except Exception as exc:
            logger.error(
                "Fault while executing work on %s",
                self.name,
                exc_info=exc,
                extra={"stream": self.name},
            )
            if self._error is None:
                self._error = exc

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.synchronize()

    def __repr__(self) -> str:
        return f"Stream(name={self.name!r}, device={self._device})"
