"""
Benchmarks: eager vs jitted launches across block sizes.

For each block size we run the same zip launch (eltwise_divide_check_zero)
with use_jit=False and use_jit=True, average RUNS runs after a warm-up, and
plot the timings and speedups.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Tuple

os.environ.setdefault("JAX_PLATFORMS", "cpu")

import matplotlib.pyplot as plt
import numpy as np

# Ensure we import the in-repo version
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from eltwise import DeviceBuffer, Session, Stream, eltwise_divide_check_zero

RUNS = 20
LENGTH = 1 << 20
BLOCK_SIZES = (64, 256, 1024)
SAVE_DIR = Path("benchmarks")


def _time_runs(fn: Callable[[], None], stream: Stream, runs: int = RUNS) -> float:
    """Run fn `runs` times and return average duration in seconds."""
    # Warm-up, includes compilation
    fn()
    stream.synchronize()
    start = time.perf_counter()
    for _ in range(runs):
        fn()
    stream.synchronize()
    duration = time.perf_counter() - start
    return duration / runs


def run_divide(block_size: int, use_jit: bool) -> float:
    rng = np.random.default_rng(0)
    lhs = rng.normal(size=LENGTH).astype(np.float32)
    rhs = rng.integers(0, 4, size=LENGTH).astype(np.float32)
    stream = Stream(name=f"bench-{block_size}")
    a = DeviceBuffer.from_host(lhs)
    b = DeviceBuffer.from_host(rhs)
    out = DeviceBuffer.empty(LENGTH)

    def fn() -> None:
        eltwise_divide_check_zero(out, a, b, LENGTH, stream)

    with Session(block_size=block_size, use_jit=use_jit):
        return _time_runs(fn, stream)


@dataclass
class BenchmarkResult:
    label: str
    eager_avg: float
    jit_avg: float

    @property
    def speedup(self) -> float:
        return self.eager_avg / self.jit_avg if self.jit_avg > 0 else 0.0


def plot_results(results: Tuple[BenchmarkResult, ...]) -> None:
    labels = [r.label for r in results]
    eager = [r.eager_avg for r in results]
    jitted = [r.jit_avg for r in results]
    speedups = [r.speedup for r in results]

    x = np.arange(len(labels))
    width = 0.35

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    ax0 = axes[0]
    ax0.bar(x - width / 2, eager, width, label="eager")
    ax0.bar(x + width / 2, jitted, width, label="jitted")
    ax0.set_ylabel("Avg runtime (s)")
    ax0.set_xticks(x)
    ax0.set_xticklabels(labels)
    ax0.legend()
    ax0.set_title(f"Average of {RUNS} runs, {LENGTH} elements")

    ax1 = axes[1]
    ax1.bar(labels, speedups, color="#4caf50")
    ax1.set_ylabel("Speedup (eager / jitted)")
    ax1.set_title("Speedup")
    for idx, val in enumerate(speedups):
        ax1.text(idx, val + 0.02, f"{val:.2f}x", ha="center", va="bottom")

    fig.tight_layout()
    SAVE_DIR.mkdir(parents=True, exist_ok=True)
    out_path = SAVE_DIR / "launch_config_sweep.png"
    plt.savefig(out_path, dpi=180)
    print(f"Saved plot to {out_path}")


def main() -> None:
    results = tuple(
        BenchmarkResult(
            f"block {block_size}",
            run_divide(block_size, use_jit=False),
            run_divide(block_size, use_jit=True),
        )
        for block_size in BLOCK_SIZES
    )

    for r in results:
        print(
            f"{r.label:>12}: eager {r.eager_avg:.4f}s, "
            f"jitted {r.jit_avg:.4f}s, speedup {r.speedup:.2f}x"
        )

    plot_results(results)


if __name__ == "__main__":
    main()
