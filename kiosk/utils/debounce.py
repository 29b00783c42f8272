import threading
import logging

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Delay a call until input has been quiet for `delay` seconds.

    Each call() cancels the pending timer and starts a new one, so only the
    last call in a burst of keystrokes fires.

    Timer.cancel() has no effect once the timer thread is running, so every
    timer carries the generation it was scheduled in. A timer whose
    generation is no longer current was superseded or cancelled and does
    nothing when it fires.
    """

    def __init__(self, delay, timer_factory=threading.Timer):
        self.delay = delay
        self._timer_factory = timer_factory
        self._timer = None
        self._generation = 0
        self._lock = threading.Lock()

    def call(self, func, *args, **kwargs):
        with self._lock:
            self._cancel_pending()
            generation = self._generation
            timer = self._timer_factory(self.delay, self._fire, args=(generation, func, args, kwargs))
            timer.daemon = True
            self._timer = timer
        timer.start()
        return timer

    def _fire(self, generation, func, args, kwargs):
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Skipping superseded debounced call to {getattr(func, '__name__', func)}")
                return
            self._generation += 1
            self._timer = None
        func(*args, **kwargs)

    def cancel(self):
        with self._lock:
            self._cancel_pending()

    def _cancel_pending(self):
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def pending(self):
        return self._timer is not None
