"""
Element functions accepted by the map/zip primitives.

An element function is any JAX-traceable callable taking one (map) or two
(zip) element values. It may close over a single scalar through `capture`,
which keeps the scalar out of the compilation key so that new scalar values
reuse the compiled launch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Tuple, Union

import jax


class UnaryElementFunction(Protocol):
    def __call__(self, x: jax.Array) -> jax.Array: ...


class BinaryElementFunction(Protocol):
    def __call__(self, a: jax.Array, b: jax.Array) -> jax.Array: ...


@dataclass(frozen=True)
class CapturedFunction:
    """
    Element function with one captured scalar.

    `fn` receives the captured scalar as its last positional argument, e.g.
    ``capture(lambda x, s: x * s, 2.0)`` behaves like ``lambda x: x * 2.0``.
    """

    fn: Callable[..., jax.Array]
    scalar: Any

    def __call__(self, *elements: jax.Array) -> jax.Array:
        return self.fn(*elements, self.scalar)


ElementFunction = Union[UnaryElementFunction, BinaryElementFunction, CapturedFunction]


def capture(fn: Callable[..., jax.Array], scalar: Any) -> CapturedFunction:
    return CapturedFunction(fn=fn, scalar=scalar)


def split(f: ElementFunction) -> Tuple[Callable[..., jax.Array], Optional[Any]]:
    """
    Separate an element function into its static callable and captured scalar.

    Returns
    -------
    Tuple[Callable, Optional[Any]]
        (fn, scalar) where scalar is None for plain callables.
    """
    if isinstance(f, CapturedFunction):
        return f.fn, f.scalar
    return f, None


def bind(
    fn: Callable[..., jax.Array], captured: Optional[jax.Array]
) -> Callable[..., jax.Array]:
    """Inverse of `split`, used inside kernels once the scalar is traced."""
    if captured is None:
        return fn
    return lambda *elements: fn(*elements, captured)
