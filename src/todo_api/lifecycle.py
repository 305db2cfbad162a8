from __future__ import annotations

import logging
import signal
import threading
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import StartupError

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# How long the listener gets to exit once force_exit is set.
FORCE_EXIT_GRACE = 1.0


class State(str, Enum):
    STARTING = "starting"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


# PUBLIC_INTERFACE
class Lifecycle:
    """
    Runs a listener until a termination signal arrives, then shuts it down
    within a bounded time and releases resources.

    ``server`` follows the ``uvicorn.Server`` surface: a blocking ``run()``,
    a ``started`` flag set once the socket is bound, and the ``should_exit``
    and ``force_exit`` flags it polls from its event loop. The listener runs
    in a background thread; signals are handled on the thread calling
    ``run()``.
    """

    def __init__(
        self,
        server: Any,
        shutdown_timeout: float = 5.0,
        on_stopped: Iterable[Callable[[], None]] = (),
        poll_interval: float = 0.05,
    ) -> None:
        self._server = server
        self._shutdown_timeout = shutdown_timeout
        self._on_stopped: List[Callable[[], None]] = list(on_stopped)
        self._poll_interval = poll_interval

        self._state = State.STARTING
        self._lock = threading.RLock()
        self._wakeup = threading.Event()
        self._shutdown_requested = threading.Event()
        self._listener_done = threading.Event()
        self._listener_error: Optional[BaseException] = None
        self._shutdown_reason: Optional[str] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> State:
        return self._state

    @property
    def shutdown_reason(self) -> Optional[str]:
        return self._shutdown_reason

    def request_shutdown(self, reason: str = "shutdown request") -> None:
        """Start the shutdown sequence. Only the first call has an effect."""
        with self._lock:
            if self._shutdown_requested.is_set():
                logger.info("Received %s while already shutting down; ignoring", reason)
                return
            self._shutdown_reason = reason
            self._shutdown_requested.set()
        self._wakeup.set()

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self.request_shutdown(signal.Signals(signum).name)

    def _install_signal_handlers(self) -> Dict[int, Any]:
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous = {}
        for sig in SHUTDOWN_SIGNALS:
            previous[sig] = signal.signal(sig, self._handle_signal)
        return previous

    def _serve(self) -> None:
        try:
            self._server.run()
        except (Exception, SystemExit) as exc:
            # uvicorn reports a failed bind with sys.exit(1)
            self._listener_error = exc
        finally:
            self._listener_done.set()
            self._wakeup.set()

    def _describe_listener_exit(self) -> str:
        if self._listener_error is None:
            return "listener exited unexpectedly"
        return f"listener failed: {self._listener_error!r}"

    def _start_listener(self) -> None:
        self._thread = threading.Thread(target=self._serve, name="todo-api-listener", daemon=True)
        self._thread.start()
        while not self._server.started:
            if self._listener_done.is_set():
                raise StartupError(self._describe_listener_exit())
            if self._shutdown_requested.is_set():
                return
            self._wakeup.wait(self._poll_interval)
        self._state = State.SERVING
        logger.info("Listener is serving")

    def _wait(self) -> None:
        # Short waits keep the main thread responsive to signal handlers.
        while not self._wakeup.wait(self._poll_interval * 10):
            pass

    def _shutdown(self) -> None:
        self._state = State.SHUTTING_DOWN
        logger.info("Received %s, gracefully shutting down...", self._shutdown_reason)
        self._server.should_exit = True
        assert self._thread is not None
        self._thread.join(self._shutdown_timeout)
        if self._thread.is_alive():
            logger.warning(
                "In-flight requests did not finish within %.1fs; forcing shutdown",
                self._shutdown_timeout,
            )
            self._server.force_exit = True
            self._thread.join(FORCE_EXIT_GRACE)

    def _release(self) -> None:
        for callback in self._on_stopped:
            try:
                callback()
            except Exception:
                logger.exception("Error while releasing resources")

    def run(self) -> int:
        """
        Serve until shutdown. Returns the process exit code: 0 after a
        requested shutdown, 1 when the listener failed while serving.

        Raises StartupError if the listener cannot start.
        """
        previous = self._install_signal_handlers()
        try:
            self._start_listener()
            self._wait()
            if self._listener_done.is_set() and not self._shutdown_requested.is_set():
                self._state = State.SHUTTING_DOWN
                logger.critical("Error serving requests: %s", self._describe_listener_exit())
                return 1
            self._shutdown()
            return 0
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)
            self._release()
            self._state = State.STOPPED
            logger.info("Server stopped")
