"""
Pre-compile the Numba kernels so the first drag over an image does not
stall on JIT compilation.

Call ``warmup_kernels()`` once at startup before showing the window. With
a warm on-disk cache the calls return almost instantly; on a cold cache
the full LLVM compilation runs.
"""

import logging
import time

import numpy as np

logger = logging.getLogger("pymeandiff.core")


def warmup_kernels() -> tuple[bool, float]:
    """Trigger JIT compilation for every pixel model the filter supports.

    Returns
    -------
    is_first_run : bool
        ``True`` when the compilation took long enough that it was
        likely a cold-cache (first-launch) run.
    elapsed_ms : float
        Wall-clock time spent warming up, in milliseconds.
    """
    from ..processing.difference_of_mean import Radii, RadiusPair
    from ..processing.integral import create_integral_image

    start = time.perf_counter()

    radii = Radii(RadiusPair(1, 1), RadiusPair(0, 0))
    samples = [
        np.zeros((4, 4), dtype=np.uint8),
        np.zeros((4, 4), dtype=np.uint16),
        np.zeros((4, 4), dtype=np.float32),
        np.zeros((4, 4), dtype=np.float64),
        np.zeros((4, 4, 3), dtype=np.uint8),
    ]
    for sample in samples:
        integral = create_integral_image(sample)
        integral.difference_of_mean(radii)
        integral.get_mean_difference((-1, -1, 1, 1), (0, 0, 1, 1))

    elapsed_ms = (time.perf_counter() - start) * 1000.0

    # Heuristic: if it took more than 2 s it was very likely a cold cache
    is_first_run = elapsed_ms > 2000.0

    if is_first_run:
        logger.info(
            "First-launch Numba kernel compilation completed in %.0f ms",
            elapsed_ms,
        )
    else:
        logger.debug("Numba kernel cache warm (%.0f ms)", elapsed_ms)

    return is_first_run, elapsed_ms
