import logging
import os
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

logger = logging.getLogger(__name__)


def _setup_numba_cache():
    """Point the Numba kernel cache at the user cache dir before numba is imported."""
    if os.environ.get("NUMBA_CACHE_DIR"):
        return

    from platformdirs import user_cache_dir

    cache_dir = Path(user_cache_dir("pymeandiff", ensure_exists=True)) / "numba"
    cache_dir.mkdir(parents=True, exist_ok=True)
    os.environ["NUMBA_CACHE_DIR"] = str(cache_dir)
    logger.debug(f"Numba cache directory set to: {cache_dir}")


def _setup_numba_threading():
    """Pick the workqueue layer so the interpreter can exit after the repaint worker ran."""
    # The TBB layer keeps the process alive once a parallel kernel has run
    # on a non-main thread. Kernels are only ever launched from one thread at
    # a time (warm-up, then the repaint worker), which workqueue requires.
    layer = os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")
    logger.debug(f"Numba threading layer: {layer}")


# MUST set the Numba cache dir and threading layer BEFORE importing numba anywhere
_setup_numba_cache()
_setup_numba_threading()

from .core import (  # noqa: E402
    SUPPORTED_EXTS,
    apply_difference_of_mean,
    open_image,
    save_image,
    to_display_uint8,
)
from .engine import FilterKey, InteractiveDifferenceOfMean, Region  # noqa: E402
from .processing import (  # noqa: E402
    PixelModel,
    UnsupportedPixelModelError,
    create_integral_image,
)

__all__ = [
    "apply_difference_of_mean",
    "open_image",
    "save_image",
    "to_display_uint8",
    "create_integral_image",
    "InteractiveDifferenceOfMean",
    "FilterKey",
    "Region",
    "PixelModel",
    "UnsupportedPixelModelError",
    "SUPPORTED_EXTS",
]

try:
    __version__ = version("pymeandiff")
except PackageNotFoundError:
    __version__ = "unknown"
