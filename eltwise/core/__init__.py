"""
Core launch machinery: buffers, streams, launch metadata, kernels and the
map/zip primitives every element-wise operation is built on.
"""

from eltwise.core import buffer, functions, jitted, kernels, meta, primitives, stream

__all__ = ["buffer", "functions", "jitted", "kernels", "meta", "primitives", "stream"]
