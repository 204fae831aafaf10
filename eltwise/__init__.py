"""Top-level eltwise helpers."""

# 64-bit element and index types need x64 enabled before any array is
# created, so this runs before importing the submodules.

import jax

jax.config.update("jax_enable_x64", True)

from eltwise import _math, core, linalg, operation  # noqa: E402
from eltwise.core.buffer import DeviceBuffer  # noqa: E402
from eltwise.core.functions import CapturedFunction, capture  # noqa: E402
from eltwise.core.primitives import map_op, zip_op  # noqa: E402
from eltwise.core.stream import Stream, StreamError  # noqa: E402
from eltwise.eltwise import Config, Session  # noqa: E402
from eltwise.linalg import (  # noqa: E402
    eltwise_add,
    eltwise_divide,
    eltwise_divide_check_zero,
    eltwise_multiply,
    eltwise_sub,
    scalar_add,
    scalar_multiply,
)
from eltwise.operation import EltwiseOperationType, apply_operation  # noqa: E402

__all__ = [
    "core",
    "linalg",
    "operation",
    "_math",
    "Config",
    "Session",
    "DeviceBuffer",
    "Stream",
    "StreamError",
    "CapturedFunction",
    "capture",
    "map_op",
    "zip_op",
    "scalar_add",
    "scalar_multiply",
    "eltwise_add",
    "eltwise_sub",
    "eltwise_multiply",
    "eltwise_divide",
    "eltwise_divide_check_zero",
    "EltwiseOperationType",
    "apply_operation",
]
