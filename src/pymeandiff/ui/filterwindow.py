import logging
from pathlib import Path

from PySide6 import QtGui, QtWidgets
from PySide6.QtCore import Qt, Signal

from ..core import save_image
from ..engine import FilterKey, InteractiveDifferenceOfMean
from .widgets import ImageCanvas, array_to_qimage

logger = logging.getLogger(__name__)

KEY_BINDINGS = {
    Qt.Key_Return: FilterKey.CONFIRM,
    Qt.Key_Enter: FilterKey.CONFIRM,
    Qt.Key_Escape: FilterKey.CANCEL,
    Qt.Key_F1: FilterKey.HELP,
}


class FilterWindow(QtWidgets.QMainWindow):
    """Hosts the interactive filter: forwards canvas drags and keys to the engine."""

    # Emitted from the repaint worker with a private copy of the frame;
    # delivered to the GUI thread as a queued call
    frameReady = Signal(QtGui.QImage)
    finished = Signal(bool)

    def __init__(
        self, image, output_path=None, primary=(0, 0), secondary=(0, 0), parent=None
    ):
        super().__init__(parent)
        self.output_path = Path(output_path) if output_path else None

        # Raises UnsupportedPixelModelError before any widget is wired up
        self.engine = InteractiveDifferenceOfMean(
            image,
            display=self._on_frame,
            show_message=self._show_message,
            on_finished=self._on_finished,
            primary=primary,
            secondary=secondary,
        )

        self.canvas = ImageCanvas()
        self.canvas.set_image(image)
        scroll = QtWidgets.QScrollArea()
        scroll.setWidget(self.canvas)
        scroll.setAlignment(Qt.AlignCenter)
        self.setCentralWidget(scroll)

        self.canvas.regionDragged.connect(self._forward_drag)
        self.frameReady.connect(self._show_frame)

        h, w = image.shape[:2]
        self.setWindowTitle(f"Difference of Mean - {w}x{h} {self.engine.pixel_model.value}")
        self.statusBar().showMessage("Drag to size the kernel, SHIFT + drag for the second one. F1 for help.")

    def start(self):
        self.engine.start()
        self.canvas.setFocus()

    def _forward_drag(self, region, modifier):
        self.engine.on_drag(region, modifier)

    def _on_frame(self, image):
        # Runs on the worker, before the next recompute can touch the buffer
        self.frameReady.emit(array_to_qimage(image))

    def _show_frame(self, qimage):
        # Frames queued before finishing would overwrite the final image
        if not self.engine.active:
            return
        self.canvas.set_qimage(qimage)
        r1, r2 = self.engine.radii
        self.statusBar().showMessage(
            f"Kernel 1: {r1.rx}x{r1.ry}   Kernel 2: {r2.rx}x{r2.ry}"
        )

    def keyPressEvent(self, event):
        key = KEY_BINDINGS.get(event.key(), FilterKey.OTHER)
        if key is FilterKey.OTHER or not self.engine.active:
            super().keyPressEvent(event)
            return
        self.engine.on_key(key)

    def _show_message(self, title, text):
        QtWidgets.QMessageBox.information(self, title, text)

    def _on_finished(self, committed):
        self.canvas.regionDragged.disconnect(self._forward_drag)
        self.canvas.set_interactive(False)
        # The worker has been joined, the buffer is final
        self.canvas.set_image(self.engine.image)

        if committed and self.output_path is not None:
            try:
                save_image(self.engine.image, self.output_path)
                self.statusBar().showMessage(f"Applied and saved to {self.output_path}")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to save {self.output_path}: {e}")
                QtWidgets.QMessageBox.critical(self, "Save failed", str(e))
        else:
            self.statusBar().showMessage("Applied" if committed else "Cancelled")

        self.finished.emit(committed)

    def closeEvent(self, event):
        if self.engine.active:
            self.engine.cancel()
        super().closeEvent(event)
