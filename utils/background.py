"""A long-lived asyncio loop on a daemon thread, for sync callers like Flask views."""

import asyncio
import logging
import threading

log = logging.getLogger(__name__)


class BackgroundLoop:
    """Owns one event loop so tasks and clients created on it outlive a single call."""

    def __init__(self, name="forgeflow-loop"):
        self.name = name
        self.loop = None
        self._thread = None
        self._lock = threading.Lock()

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        with self._lock:
            if self.running:
                return
            self.loop = asyncio.new_event_loop()
            self._thread = threading.Thread(target=self._serve, name=self.name, daemon=True)
            self._thread.start()
            log.debug("Background loop %s started", self.name)

    def _serve(self):
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self.loop)
            for task in pending:
                task.cancel()
            if pending:
                self.loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self.loop.close()

    def run(self, coro, timeout=None):
        """Run ``coro`` on the background loop and block for its result."""
        if not self.running:
            coro.close()
            raise RuntimeError(f"Background loop {self.name} is not running")
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return future.result(timeout)

    def stop(self):
        with self._lock:
            if not self.running:
                return
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join()
            self._thread = None
            log.debug("Background loop %s stopped", self.name)
