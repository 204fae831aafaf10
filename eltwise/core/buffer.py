"""
Device buffer handle
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

import jax
import jax.numpy as jnp
import numpy as np

logger = logging.getLogger(__name__)


class DeviceBuffer:
    """
    Handle to a one-dimensional array resident on an accelerator device.

    JAX arrays are immutable, so writes performed by the primitives replace
    the backing array of the handle. Every holder of the same `DeviceBuffer`
    observes the replacement, which is what makes in-place (aliased) calls
    and stream ordering work.

    Attributes
    ----------
    uid: uuid.UUID
        Identifier used in log records
    array: jax.Array
        Current backing array, may still be pending on its device
    """

    __slots__ = ("uid", "_array")

    def __init__(self, array: jax.Array) -> None:
        if array.ndim != 1:
            raise ValueError(
                f"Device buffers are one-dimensional; got shape {array.shape}"
            )
        self.uid: uuid.UUID = uuid.uuid4()
        self._array: jax.Array = array
        logger.debug(
            "Creating buffer %s (%d x %s)",
            self.uid,
            array.shape[0],
            array.dtype,
            extra={"buffer": self.uid},
        )

    @classmethod
    def from_host(
        cls,
        data: Any,
        dtype: Any = None,
        device: Optional[jax.Device] = None,
    ) -> "DeviceBuffer":
        """
        Copy host data (list, numpy array, ...) into a new device buffer.
        The copy is enqueued asynchronously.
        """
        host = np.asarray(data, dtype=dtype).reshape(-1)
        return cls(jax.device_put(host, device))

    @classmethod
    def zeros(
        cls,
        size: int,
        dtype: Any = jnp.float32,
        device: Optional[jax.Device] = None,
    ) -> "DeviceBuffer":
        return cls(jax.device_put(jnp.zeros((size,), dtype=dtype), device))

    @classmethod
    def empty(
        cls,
        size: int,
        dtype: Any = jnp.float32,
        device: Optional[jax.Device] = None,
    ) -> "DeviceBuffer":
        """
        Allocate a buffer whose contents are not meant to be read before the
        first write. XLA has no uninitialised allocation, so this is zeroed.
        """
        return cls(jax.device_put(jnp.empty((size,), dtype=dtype), device))

    @property
    def array(self) -> jax.Array:
        return self._array

    @array.setter
    def array(self, array: jax.Array) -> None:
        self._array = array

    @property
    def size(self) -> int:
        return int(self._array.shape[0])

    @property
    def dtype(self) -> np.dtype:
        return self._array.dtype

    @property
    def device(self) -> jax.Device:
        (device,) = self._array.devices()
        return device

    def block_until_ready(self) -> "DeviceBuffer":
        self._array.block_until_ready()
        return self

    def to_host(self) -> np.ndarray:
        """Blocking copy of the whole buffer to host memory."""
        return np.asarray(jax.device_get(self._array))

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return (
            f"DeviceBuffer(uid={self.uid}, size={self.size}, "
            f"dtype={self.dtype}, device={self.device})"
        )
