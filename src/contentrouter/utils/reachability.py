"""One-shot network reachability probe.

A ``PathMonitor`` watches the network path and reports every evaluation to a
handler until it is cancelled. ``is_network_available`` starts a monitor,
takes its first report and tears the monitor down immediately.
"""

import asyncio
import logging
import socket
from typing import Callable, Optional

from contentrouter.core.constants import (
    DEFAULT_PROBE_HOST,
    DEFAULT_PROBE_INTERVAL,
    DEFAULT_PROBE_PORT,
)

logger = logging.getLogger(__name__)

PathHandler = Callable[[bool], None]


def path_satisfied(
    host: str = DEFAULT_PROBE_HOST, port: int = DEFAULT_PROBE_PORT
) -> bool:
    """Check whether the OS has a usable, non-loopback route to ``host``.

    Connecting a UDP socket only performs a route lookup; no packet is sent.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect((host, port))
            ip = sock.getsockname()[0]
    except OSError:
        return False
    return bool(ip) and not ip.startswith("127.") and ip != "0.0.0.0"


class PathMonitor:
    """Watches the network path on the running event loop."""

    def __init__(
        self,
        host: str = DEFAULT_PROBE_HOST,
        port: int = DEFAULT_PROBE_PORT,
        interval: float = DEFAULT_PROBE_INTERVAL,
    ):
        self.host = host
        self.port = port
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled

    def evaluate(self) -> bool:
        return path_satisfied(self.host, self.port)

    def start(self, handler: PathHandler) -> None:
        """Start watching; ``handler`` receives every path evaluation.

        Raises:
            RuntimeError: If the monitor is already running
        """
        if self._task is not None:
            raise RuntimeError("PathMonitor can only be started once")
        self._task = asyncio.get_running_loop().create_task(self._watch(handler))

    def add_done_callback(self, callback: Callable[[asyncio.Task], None]) -> None:
        if self._task is None:
            raise RuntimeError("PathMonitor has not been started")
        self._task.add_done_callback(callback)

    def cancel(self) -> None:
        """Stop watching. Safe to call from inside the handler and more than once."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            if self._task is not asyncio.current_task():
                self._task.cancel()
        logger.debug("Path monitor cancelled")

    async def _watch(self, handler: PathHandler) -> None:
        loop = asyncio.get_running_loop()
        while not self._cancelled:
            try:
                # Route lookup may resolve a hostname, so keep it off the loop
                satisfied = await loop.run_in_executor(None, self.evaluate)
            except Exception as e:
                logger.warning(f"Path evaluation failed, treating as unsatisfied: {e}")
                satisfied = False
            if self._cancelled:
                break
            handler(satisfied)
            if self._cancelled:
                break
            await asyncio.sleep(self.interval)


async def is_network_available(monitor: Optional[PathMonitor] = None) -> bool:
    """Report whether any network path is currently usable.

    The monitor is cancelled as soon as its first report arrives, and again
    on exit so it never outlives this call.
    """
    monitor = monitor if monitor is not None else PathMonitor()
    result: asyncio.Future = asyncio.get_running_loop().create_future()

    def _on_update(satisfied: bool) -> None:
        monitor.cancel()
        if not result.done():
            result.set_result(satisfied)

    def _on_done(task: asyncio.Task) -> None:
        if not result.done():
            if not task.cancelled() and task.exception() is not None:
                logger.warning(f"Path monitor stopped: {task.exception()}")
            result.set_result(False)

    monitor.start(_on_update)
    monitor.add_done_callback(_on_done)
    try:
        available = await result
    finally:
        monitor.cancel()

    logger.info(f"Network available: {available}")
    return available


class ReachabilityProbe:
    """Callable probe that creates a fresh ``PathMonitor`` for every check."""

    def __init__(
        self,
        host: str = DEFAULT_PROBE_HOST,
        port: int = DEFAULT_PROBE_PORT,
        interval: float = DEFAULT_PROBE_INTERVAL,
    ):
        self.host = host
        self.port = port
        self.interval = interval

    def create_monitor(self) -> PathMonitor:
        return PathMonitor(self.host, self.port, self.interval)

    async def __call__(self) -> bool:
        return await is_network_available(self.create_monitor())
