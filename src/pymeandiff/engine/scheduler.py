import logging
import threading
import time

logger = logging.getLogger(__name__)

WORKER_THREAD_NAME = "DifferenceOfMeanPainter"


class RepaintScheduler:
    """
    Single background worker that coalesces repaint requests.

    Any number of ``request_repaint()`` calls made while a render is running
    collapse into exactly one follow-up render. The pending flag, the stop
    request and whatever ``update``/``snapshot`` touch are all guarded by the
    same condition lock.
    """

    def __init__(self, render, snapshot=None, name=WORKER_THREAD_NAME):
        self._render = render
        self._snapshot = snapshot
        self._name = name
        self._cond = threading.Condition()
        self._pending = False
        self._rendering = False
        self._stop_requested = False
        self._thread = None
        self.completed_renders = 0

    @property
    def is_running(self):
        return self._thread is not None and self._thread.is_alive()

    @property
    def lock(self):
        """Condition lock guarding the pending flag and the shared render state."""
        return self._cond

    @property
    def is_pending(self):
        with self._cond:
            return self._pending

    def start(self):
        if self._thread is not None:
            raise RuntimeError("Repaint worker already started")
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug(f"Repaint worker '{self._name}' started")

    def request_repaint(self, update=None):
        """Marks a repaint as pending, running ``update`` under the same lock first."""
        with self._cond:
            if update is not None:
                update()
            self._pending = True
            self._cond.notify_all()

    def stop(self, wait=True, timeout=None):
        """Stops the worker. A render already in progress is allowed to finish."""
        with self._cond:
            self._stop_requested = True
            self._cond.notify_all()

        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def wait_until_idle(self, timeout=None):
        """Blocks until no render is pending or running. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(
                lambda: self._stop_requested or not (self._pending or self._rendering),
                timeout,
            )

    def _run(self):
        while True:
            with self._cond:
                while not self._pending and not self._stop_requested:
                    self._cond.wait()
                if self._stop_requested:
                    break
                self._pending = False
                self._rendering = True
                state = self._snapshot() if self._snapshot is not None else None

            start_time = time.perf_counter()
            try:
                self._render(state)
            except Exception as e:
                logger.error(f"Repaint failed: {e}", exc_info=True)
            elapsed = (time.perf_counter() - start_time) * 1000

            with self._cond:
                self._rendering = False
                self.completed_renders += 1
                self._cond.notify_all()
            logger.debug(f"Repaint #{self.completed_renders} done ({elapsed:.2f}ms)")

        with self._cond:
            self._rendering = False
            self._cond.notify_all()
        logger.debug(f"Repaint worker '{self._name}' stopped")
