"""
An example, standardising feature columns with eltwise operations on one stream
"""

import os

os.environ.setdefault("JAX_PLATFORMS", "cpu")

import numpy as np

from eltwise import (
    DeviceBuffer,
    Stream,
    eltwise_divide_check_zero,
    eltwise_multiply,
    eltwise_sub,
    scalar_add,
    scalar_multiply,
)
from eltwise.logging.logging import setup_logging


def standardize(values: np.ndarray, mean: np.ndarray, std: np.ndarray) -> np.ndarray:
    """
    (values - mean) / std per element, constant features (std == 0) map to 0
    """
    n = values.size
    x = DeviceBuffer.from_host(values, dtype=np.float32)
    mu = DeviceBuffer.from_host(mean, dtype=np.float32)
    sigma = DeviceBuffer.from_host(std, dtype=np.float32)

    with Stream(name="standardize") as stream:
        # every call reads what the previous one wrote, in place
        eltwise_sub(x, x, mu, n, stream)
        eltwise_divide_check_zero(x, x, sigma, n, stream)
    return x.to_host()


def squared_error(
    pred: np.ndarray, target: np.ndarray, scale: float, offset: float = 0.0
) -> np.ndarray:
    """
    scale * (pred - target) ** 2 + offset per element
    """
    n = pred.size
    p = DeviceBuffer.from_host(pred, dtype=np.float32)
    t = DeviceBuffer.from_host(target, dtype=np.float32)
    out = DeviceBuffer.empty(n)

    stream = Stream(name="loss")
    eltwise_sub(out, p, t, n, stream)
    eltwise_multiply(out, out, out, n, stream)
    scalar_multiply(out, out, scale, n, stream)
    scalar_add(out, out, offset, n, stream)
    stream.synchronize()
    return out.to_host()


if __name__ == "__main__":
    setup_logging()
    features = np.array([1.0, 5.0, 3.0, 7.0, 2.0, 2.0])
    means = np.array([2.0, 4.0, 3.0, 6.0, 2.0, 2.0])
    stds = np.array([1.0, 0.5, 0.0, 2.0, 1.0, 0.0])
    print("standardized:", standardize(features, means, stds))
    print("squared error:", squared_error(features, means, 0.5, 1.0))
