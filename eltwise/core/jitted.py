"""
Jitted entry points for the launch kernels using static launch metadata.

The element function and `LaunchMeta` are static arguments, so one compiled
executable exists per (function, length, index dtype, block size, dtypes).
Captured scalars are traced and never trigger recompilation. Element
functions should therefore be long-lived objects (module level functions)
rather than fresh lambdas per call.

Function objects that cannot be hashed (a plain `@dataclass` with `__call__`)
are keyed by identity, so reusing the same instance reuses the executable.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Optional

import jax

from eltwise.core import kernels
from eltwise.core.meta import LaunchMeta

logger = logging.getLogger(__name__)


@partial(jax.jit, static_argnames=("meta", "fn"))
def _map_into_jitted(
    out: jax.Array,
    values: jax.Array,
    captured: Optional[jax.Array],
    meta: LaunchMeta,
    fn: Callable[..., jax.Array],
) -> jax.Array:
    # Runs only while tracing, i.e. on a compilation cache miss.
    logger.debug("Tracing map launch %s for %r", meta, fn)
    return kernels.map_into(meta, out, values, fn, captured)


@partial(jax.jit, static_argnames=("meta", "fn"))
def _zip_into_jitted(
    out: jax.Array,
    lhs: jax.Array,
    rhs: jax.Array,
    captured: Optional[jax.Array],
    meta: LaunchMeta,
    fn: Callable[..., jax.Array],
) -> jax.Array:
    logger.debug("Tracing zip launch %s for %r", meta, fn)
    return kernels.zip_into(meta, out, lhs, rhs, fn, captured)


class _IdentityKeyed:
    """Static stand-in for an unhashable element function."""

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[..., jax.Array]) -> None:
        self.fn = fn

    def __call__(self, *args: jax.Array) -> jax.Array:
        return self.fn(*args)

    def __hash__(self) -> int:
        return id(self.fn)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _IdentityKeyed) and other.fn is self.fn

    def __repr__(self) -> str:
        return f"_IdentityKeyed({self.fn!r})"


def _static_fn(fn: Callable[..., jax.Array]) -> Callable[..., jax.Array]:
    try:
        hash(fn)
    except TypeError:
        logger.debug("Keying unhashable element function %r by identity", fn)
        return _IdentityKeyed(fn)
    return fn


def map_into(
    meta: LaunchMeta,
    out: jax.Array,
    values: jax.Array,
    fn: Callable[..., jax.Array],
    captured: Optional[jax.Array] = None,
    use_jit: bool = True,
) -> jax.Array:
    if not use_jit:
        return kernels.map_into(meta, out, values, fn, captured)
    return _map_into_jitted(out, values, captured, meta=meta, fn=_static_fn(fn))


def zip_into(
    meta: LaunchMeta,
    out: jax.Array,
    lhs: jax.Array,
    rhs: jax.Array,
    fn: Callable[..., jax.Array],
    captured: Optional[jax.Array] = None,
    use_jit: bool = True,
) -> jax.Array:
    if not use_jit:
        return kernels.zip_into(meta, out, lhs, rhs, fn, captured)
    return _zip_into_jitted(out, lhs, rhs, captured, meta=meta, fn=_static_fn(fn))
