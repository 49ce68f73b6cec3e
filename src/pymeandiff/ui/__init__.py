import argparse
import logging
import sys

from .. import __version__
from ..core import SUPPORTED_EXTS, open_image
from ..processing import UnsupportedPixelModelError
from .filterwindow import FilterWindow

logger = logging.getLogger(__name__)


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="pymeandiff",
        description="Interactively tune a difference of mean filter on an image",
    )
    parser.add_argument("image", nargs="?", help="Image to filter")
    parser.add_argument(
        "--output", help="Save the result here when the filter is applied (ENTER)"
    )
    parser.add_argument(
        "--radius",
        nargs=2,
        type=int,
        default=(0, 0),
        metavar=("RX", "RY"),
        help="Initial primary kernel radius",
    )
    parser.add_argument(
        "--secondary",
        nargs=2,
        type=int,
        default=(0, 0),
        metavar=("RX", "RY"),
        help="Initial secondary kernel radius",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main():
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from PySide6 import QtWidgets

    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName("pymeandiff")

    path = args.image
    if not path:
        patterns = " ".join(f"*{ext}" for ext in SUPPORTED_EXTS)
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            None, "Open Image", "", f"Images ({patterns})"
        )
        if not path:
            sys.exit(0)

    try:
        image = open_image(path)
        window = FilterWindow(
            image,
            output_path=args.output,
            primary=tuple(args.radius),
            secondary=tuple(args.secondary),
        )
    except (OSError, UnsupportedPixelModelError, ValueError) as e:
        logger.error(f"Cannot filter {path}: {e}")
        QtWidgets.QMessageBox.critical(None, "pymeandiff", str(e))
        sys.exit(1)

    from ..utils.numba_warmup import warmup_kernels

    warmup_kernels()

    window.show()
    window.start()
    sys.exit(app.exec())
