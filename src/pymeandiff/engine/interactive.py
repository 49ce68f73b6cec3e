import logging
from enum import Enum

import numpy as np

from ..processing.difference_of_mean import Radii, render_difference_of_mean
from ..processing.integral import create_integral_image
from .scheduler import RepaintScheduler
from .state import RadiusState, Region

logger = logging.getLogger(__name__)

HELP_TITLE = "Interactive Difference of Mean"
HELP_TEXT = "\n".join(
    [
        "Click and drag to change the size of the smoothing kernel.",
        "SHIFT + drag - Change the second kernel",
        "ENTER - Apply",
        "ESC - Cancel",
    ]
)


class FilterKey(Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    HELP = "help"
    OTHER = "other"


class InteractiveDifferenceOfMean:
    """
    Interactive difference-of-mean filter over a host-owned pixel buffer.

    The host forwards drags and keys through ``on_drag`` / ``on_key``; every
    recompute overwrites ``image`` in place and is handed to ``display``.
    """

    def __init__(
        self,
        image,
        display=None,
        show_message=None,
        on_finished=None,
        primary=(0, 0),
        secondary=(0, 0),
    ):
        if not isinstance(image, np.ndarray):
            raise TypeError(f"Expected a numpy array, got {type(image).__name__}")

        # Raises UnsupportedPixelModelError before anything else is set up
        self.integral = create_integral_image(image)
        self.image = image
        self._snapshot = None
        self._radius_state = RadiusState(primary, secondary)
        self._display = display
        self._show_message = show_message
        self._on_finished = on_finished
        self._active = False
        self._finished = False
        self.painter = RepaintScheduler(
            self._paint, snapshot=self._radius_state.snapshot
        )

    @property
    def active(self):
        return self._active

    @property
    def pixel_model(self):
        return self.integral.pixel_model

    @property
    def radii(self) -> Radii:
        with self.painter.lock:
            return self._radius_state.snapshot()

    def start(self):
        if self._active or self._finished:
            raise RuntimeError("Filter already started")
        self._snapshot = self.image.copy()
        self._active = True
        self.painter.start()
        logger.info(
            f"Difference of mean started: {self.pixel_model.value} "
            f"{self.integral.width}x{self.integral.height}"
        )
        # Nothing to show until the first drag unless initial radii were given
        radii = self.radii
        if any(radii.primary + radii.secondary):
            self.painter.request_repaint()

    def recompute(self, radii: Radii | None = None):
        if radii is None:
            radii = self.radii
        return render_difference_of_mean(self.integral, radii, self.image)

    def _paint(self, radii):
        self.recompute(radii)
        self._push()

    def _push(self):
        if self._display is not None:
            self._display(self.image)

    def on_drag(self, region: Region | None, modifier: bool = False):
        if not self._active:
            return
        self.painter.request_repaint(
            lambda: self._radius_state.apply_region(region, modifier)
        )

    def on_key(self, key: FilterKey):
        if key is FilterKey.CONFIRM:
            self.confirm()
        elif key is FilterKey.CANCEL:
            self.cancel()
        elif key is FilterKey.HELP:
            self.show_help()

    def confirm(self):
        self._finish(committed=True)

    def cancel(self):
        self._finish(committed=False)

    def show_help(self):
        if self._show_message is not None:
            self._show_message(HELP_TITLE, HELP_TEXT)
        else:
            logger.info(f"{HELP_TITLE}\n{HELP_TEXT}")

    def _finish(self, committed):
        if not self._active:
            return
        self._active = False
        self._finished = True
        self.painter.stop()

        if not committed:
            np.copyto(self.image, self._snapshot)

        logger.info(
            f"Difference of mean {'applied' if committed else 'cancelled'} "
            f"after {self.painter.completed_renders} repaints"
        )
        self._push()
        if self._on_finished is not None:
            self._on_finished(committed)
