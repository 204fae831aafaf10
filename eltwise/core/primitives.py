"""
Map and zip primitives over device buffers.

Both primitives enqueue a single launch on the caller's stream and return
immediately. Upon stream completion the first `length` elements of `out`
hold the per-element results; the rest of `out` is left as it was.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import jax.numpy as jnp

from eltwise.core import functions, jitted
from eltwise.core.buffer import DeviceBuffer
from eltwise.core.functions import ElementFunction
from eltwise.core.meta import LaunchMeta, make_meta
from eltwise.core.stream import Stream
from eltwise.eltwise import Config

logger = logging.getLogger(__name__)


def _launch_meta(length: int, index_dtype: Any) -> LaunchMeta:
    cfg = Config()
    if index_dtype is None:
        index_dtype = cfg.index_dtype
    return make_meta(length, index_dtype=index_dtype, block_size=cfg.block_size)


def map_op(
    out: DeviceBuffer,
    in_: DeviceBuffer,
    length: int,
    f: ElementFunction,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    Enqueue ``out[i] = f(in_[i])`` for every ``i`` in ``[0, length)``.

    Parameters
    ----------
    out: DeviceBuffer
        Output buffer, may be the same object as `in_`
    in_: DeviceBuffer
        Input buffer, at least `length` elements
    length: int
        Number of elements, zero schedules nothing
    f: ElementFunction
        One-argument element function, optionally built with `capture`
    stream: Stream
        Stream the launch is enqueued on
    index_dtype: Any
        Index width for this launch, defaults to `Config().index_dtype`

    Raises
    ------
    ValueError
        If `length` is negative or not addressable with the index dtype
    """
    meta = _launch_meta(length, index_dtype)
    if meta.length == 0:
        logger.debug(
            "Empty map launch on %s, nothing enqueued",
            stream.name,
            extra={"stream": stream.name, "launch": "map[0]"},
        )
        return
    fn, scalar = functions.split(f)
    use_jit = Config().use_jit

    def _launch():
        captured = _as_element(scalar, in_)
        return jitted.map_into(
            meta, out.array, in_.array, fn, captured, use_jit=use_jit
        )

    result = stream.enqueue(_launch, label=f"map[{meta.length}]")
    if result is not None:
        out.array = result


def zip_op(
    out: DeviceBuffer,
    in1: DeviceBuffer,
    in2: DeviceBuffer,
    length: int,
    f: ElementFunction,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    Enqueue ``out[i] = f(in1[i], in2[i])`` for every ``i`` in ``[0, length)``.

    `out`, `in1` and `in2` may be any combination of the same buffer. See
    `map_op` for the remaining parameters.
    """
    meta = _launch_meta(length, index_dtype)
    if meta.length == 0:
        logger.debug(
            "Empty zip launch on %s, nothing enqueued",
            stream.name,
            extra={"stream": stream.name, "launch": "zip[0]"},
        )
        return
    fn, scalar = functions.split(f)
    use_jit = Config().use_jit

    def _launch():
        captured = _as_element(scalar, in1)
        return jitted.zip_into(
            meta, out.array, in1.array, in2.array, fn, captured, use_jit=use_jit
        )

    result = stream.enqueue(_launch, label=f"zip[{meta.length}]")
    if result is not None:
        out.array = result


def _as_element(scalar: Optional[Any], like: DeviceBuffer) -> Optional[Any]:
    # Captured scalars take the element type of the input buffer.
    if scalar is None:
        return None
    return jnp.asarray(scalar, dtype=like.dtype)
