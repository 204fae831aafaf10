"""
Stateless launch kernels intended for JAX JIT.

Design notes
------------
- A launch is a grid of ``num_blocks x block_size`` lanes. Lane ``(b, t)``
  owns element ``b * block_size + t``, computed in the launch index dtype.
  Lanes past ``length`` read element 0 and their results are discarded.
- The element function is vmapped over lanes and blocks, so it only ever sees
  scalars and cannot observe any other index.
- Shapes are static per compiled instance (they come from `LaunchMeta`).
  Only the ``[0, length)`` prefix of the output is replaced.
"""

from __future__ import annotations

from typing import Callable, Optional

import jax
import jax.numpy as jnp
from jax import lax

from eltwise.core.functions import bind
from eltwise.core.meta import LaunchMeta


def launch(meta: LaunchMeta, body: Callable[[jax.Array], jax.Array]) -> jax.Array:
    """
    Evaluate ``body(i)`` for every lane of the grid described by `meta`.

    Parameters
    ----------
    meta : LaunchMeta
        Static launch description.
    body : Callable[[jax.Array], jax.Array]
        Per-lane function receiving the global element index as a scalar of
        ``meta.index_dtype``.

    Returns
    -------
    jax.Array
        One-dimensional array with ``meta.length`` results.
    """
    index_dtype = jnp.dtype(meta.index_dtype)
    blocks = jnp.arange(meta.num_blocks, dtype=index_dtype)
    lanes = jnp.arange(meta.block_size, dtype=index_dtype)
    block_size = jnp.asarray(meta.block_size, dtype=index_dtype)

    def lane(block: jax.Array, thread: jax.Array) -> jax.Array:
        return body(block * block_size + thread)

    grid = jax.vmap(jax.vmap(lane, in_axes=(None, 0)), in_axes=(0, None))
    return grid(blocks, lanes).reshape((meta.extent,))[: meta.length]


def load(meta: LaunchMeta, values: jax.Array, index: jax.Array) -> jax.Array:
    index = jnp.where(index < meta.length, index, jnp.zeros_like(index))
    return lax.dynamic_index_in_dim(values, index, keepdims=False)


def store(meta: LaunchMeta, out: jax.Array, result: jax.Array) -> jax.Array:
    """Write `result` over the first ``meta.length`` elements of `out`."""
    result = result.astype(out.dtype)
    if meta.length == out.shape[0]:
        return result
    return out.at[: meta.length].set(result)


def map_into(
    meta: LaunchMeta,
    out: jax.Array,
    values: jax.Array,
    fn: Callable[..., jax.Array],
    captured: Optional[jax.Array] = None,
) -> jax.Array:
    """
    Return `out` with ``out[i] = fn(values[i])`` for ``i < meta.length``.
    """
    element_fn = bind(fn, captured)

    def body(i: jax.Array) -> jax.Array:
        return element_fn(load(meta, values, i))

    return store(meta, out, launch(meta, body))


def zip_into(
    meta: LaunchMeta,
    out: jax.Array,
    lhs: jax.Array,
    rhs: jax.Array,
    fn: Callable[..., jax.Array],
    captured: Optional[jax.Array] = None,
) -> jax.Array:
    """
    Return `out` with ``out[i] = fn(lhs[i], rhs[i])`` for ``i < meta.length``.
    """
    element_fn = bind(fn, captured)

    def body(i: jax.Array) -> jax.Array:
        return element_fn(load(meta, lhs, i), load(meta, rhs, i))

    return store(meta, out, launch(meta, body))
