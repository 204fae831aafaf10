"""
Metadata helpers for JIT-friendly launches.

`LaunchMeta` collects the element count, index dtype and grid shape of a
launch so it can be passed as a static argument to jitted entry points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from jax import dtypes

INDEX_DTYPES = ("int32", "uint32", "int64", "uint64")


@dataclass(frozen=True)
class LaunchMeta:
    length: int
    index_dtype: str
    block_size: int
    num_blocks: int

    @property
    def extent(self) -> int:
        """Number of lanes in the grid, including masked tail lanes."""
        return self.num_blocks * self.block_size


def normalize_index_dtype(index_dtype: Any) -> str:
    """
    Return the canonical name of an index dtype, e.g. ``jnp.int32 -> "int32"``.

    Raises
    ------
    ValueError
        If the dtype is not one of the supported integer widths, or is a 64-bit
        width while JAX runs without x64 support.
    """
    try:
        name = np.dtype(index_dtype).name
    except TypeError as exc:
        raise ValueError(f"Unknown index dtype: {index_dtype!r}") from exc
    if name not in INDEX_DTYPES:
        raise ValueError(
            f"Index dtype must be one of {', '.join(INDEX_DTYPES)}; got {name}"
        )
    if np.dtype(dtypes.canonicalize_dtype(name)).name != name:
        raise ValueError(f"Index dtype {name} requires jax_enable_x64")
    return name


def validate_block_size(block_size: int) -> int:
    block_size = int(block_size)
    if block_size <= 0 or block_size & (block_size - 1):
        raise ValueError(
            f"Block size must be a positive power of two; got {block_size}"
        )
    return block_size


def make_meta(
    length: int, index_dtype: Any = "int32", block_size: int = 256
) -> LaunchMeta:
    """
    Build launch metadata for `length` elements.

    The grid is rounded up to whole blocks; `length` and every lane index of
    the padded grid have to be representable in `index_dtype`.
    """
    index_dtype = normalize_index_dtype(index_dtype)
    block_size = validate_block_size(block_size)
    length = int(length)
    if length < 0:
        raise ValueError(f"Length must be non-negative; got {length}")

    num_blocks = -(-length // block_size)
    last_lane = num_blocks * block_size - 1
    if max(length, last_lane) > np.iinfo(index_dtype).max:
        raise ValueError(
            f"Length {length} is not addressable with {index_dtype} indices "
            f"(block size {block_size})"
        )
    return LaunchMeta(
        length=length,
        index_dtype=index_dtype,
        block_size=block_size,
        num_blocks=num_blocks,
    )
