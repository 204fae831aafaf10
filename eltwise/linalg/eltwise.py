"""
Element-wise arithmetic on device buffers.

Each operation is a thin wrapper that dispatches one element function from
`eltwise._math.ops` through the map or zip primitive. Operations perform no
validation of their own and return immediately; results are visible once the
stream has completed, and failures are reported by `Stream.synchronize()`.

Output buffers may alias their inputs: every operation reads and writes the
same index only. Every operation accepts a keyword-only `index_dtype` that
selects the index width of that call; when omitted, `Config().index_dtype`
is used.
"""

from __future__ import annotations

from typing import Any

from eltwise._math import ops
from eltwise.core.buffer import DeviceBuffer
from eltwise.core.functions import capture
from eltwise.core.primitives import map_op, zip_op
from eltwise.core.stream import Stream


def scalar_add(
    out: DeviceBuffer,
    in_: DeviceBuffer,
    scalar: Any,
    length: int,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    ``out[i] = in_[i] + scalar`` for ``i < length``.

    Parameters
    ----------
    out: DeviceBuffer
        Output buffer
    in_: DeviceBuffer
        Input buffer
    scalar: Any
        Value added to every element, converted to the element type of `in_`
    length: int
        Number of elements
    stream: Stream
        Stream the work is enqueued on
    index_dtype: Any
        Index width of this launch (int32, uint32, int64 or uint64)
    """
    map_op(
        out,
        in_,
        length,
        capture(ops.scalar_add, scalar),
        stream,
        index_dtype=index_dtype,
    )


def scalar_multiply(
    out: DeviceBuffer,
    in_: DeviceBuffer,
    scalar: Any,
    length: int,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    ``out[i] = in_[i] * scalar`` for ``i < length``.
    """
    map_op(
        out,
        in_,
        length,
        capture(ops.scalar_multiply, scalar),
        stream,
        index_dtype=index_dtype,
    )


def eltwise_add(
    out: DeviceBuffer,
    in1: DeviceBuffer,
    in2: DeviceBuffer,
    length: int,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    ``out[i] = in1[i] + in2[i]`` for ``i < length``.
    """
    zip_op(out, in1, in2, length, ops.add, stream, index_dtype=index_dtype)


def eltwise_sub(
    out: DeviceBuffer,
    in1: DeviceBuffer,
    in2: DeviceBuffer,
    length: int,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    ``out[i] = in1[i] - in2[i]`` for ``i < length``.
    """
    zip_op(out, in1, in2, length, ops.sub, stream, index_dtype=index_dtype)


def eltwise_multiply(
    out: DeviceBuffer,
    in1: DeviceBuffer,
    in2: DeviceBuffer,
    length: int,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    ``out[i] = in1[i] * in2[i]`` for ``i < length``.
    """
    zip_op(out, in1, in2, length, ops.multiply, stream, index_dtype=index_dtype)


def eltwise_divide(
    out: DeviceBuffer,
    in1: DeviceBuffer,
    in2: DeviceBuffer,
    length: int,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    ``out[i] = in1[i] / in2[i]`` for ``i < length``.

    Division by zero is not special-cased: floating types produce inf/NaN.
    For integer element types a zero divisor is a precondition violation and
    the value written at that position is unspecified; use
    `eltwise_divide_check_zero` when divisors may be zero.
    """
    zip_op(out, in1, in2, length, ops.divide, stream, index_dtype=index_dtype)


def eltwise_divide_check_zero(
    out: DeviceBuffer,
    in1: DeviceBuffer,
    in2: DeviceBuffer,
    length: int,
    stream: Stream,
    *,
    index_dtype: Any = None,
) -> None:
    """
    ``out[i] = 0 if in2[i] == 0 else in1[i] / in2[i]`` for ``i < length``.

    Positions with a non-zero divisor match `eltwise_divide` exactly.
    """
    zip_op(
        out,
        in1,
        in2,
        length,
        ops.divide_check_zero,
        stream,
        index_dtype=index_dtype,
    )
