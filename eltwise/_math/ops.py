"""
Per-element functions used by the arithmetic operations.

Every function here receives scalars (one lane of a launch) and must stay
free of side effects. Division uses `jax.lax.div`, i.e. the element type's
native division: true division for floating types and truncation towards zero
for integer types.
"""

import jax
import jax.numpy as jnp
from jax import lax


def add(a: jax.Array, b: jax.Array) -> jax.Array:
    return a + b


def sub(a: jax.Array, b: jax.Array) -> jax.Array:
    return a - b


def multiply(a: jax.Array, b: jax.Array) -> jax.Array:
    return a * b


def divide(a: jax.Array, b: jax.Array) -> jax.Array:
    return lax.div(a, b)


def divide_check_zero(a: jax.Array, b: jax.Array) -> jax.Array:
    """
    Division with a zero guard: positions where the divisor is zero yield zero.

    The divisor is replaced by one before dividing so integer types never see
    a zero divisor, the guarded lanes are discarded by the select anyway.
    """
    is_zero = b == jnp.zeros_like(b)
    safe_b = jnp.where(is_zero, jnp.ones_like(b), b)
    return jnp.where(is_zero, jnp.zeros_like(a), lax.div(a, safe_b))


def scalar_add(x: jax.Array, scalar: jax.Array) -> jax.Array:
    return x + scalar


def scalar_multiply(x: jax.Array, scalar: jax.Array) -> jax.Array:
    return x * scalar
