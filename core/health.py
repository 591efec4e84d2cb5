"""Periodic health polling of registered subsystems."""

import asyncio
import logging
import time

from config.defaults import DEFAULTS

log = logging.getLogger(__name__)

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"

RUNNING = "running"
UNHEALTHY_THRESHOLD = 3     # more than this many non-running subsystems


def subsystem_status(handle):
    """Status string reported by a handle; handles without get_status count as running."""
    get_status = getattr(handle, "get_status", None)
    if get_status is None:
        return RUNNING
    try:
        status = get_status()
    except Exception as e:
        log.warning("Status check failed for %s: %s", type(handle).__name__, e)
        return "error"
    return getattr(status, "value", status)


def aggregate(statuses):
    down = sum(1 for s in statuses.values() if s != RUNNING)
    if down > UNHEALTHY_THRESHOLD:
        return UNHEALTHY
    if down:
        return DEGRADED
    return HEALTHY


class HealthMonitor:
    """Snapshots every registered subsystem, on demand or on a timer."""

    def __init__(self, registry, interval=None):
        self.registry = registry
        self.interval = interval or DEFAULTS["health_check_interval"]
        self.last_snapshot = None
        self._task = None

    def snapshot(self):
        statuses = {
            subsystem_id.value: subsystem_status(self.registry.get(subsystem_id))
            for subsystem_id in self.registry.ids()
        }
        self.last_snapshot = {
            "status": aggregate(statuses),
            "subsystems": statuses,
            "checked_at": time.time(),
        }
        return self.last_snapshot

    async def _poll(self):
        while True:
            report = self.snapshot()
            if report["status"] != HEALTHY:
                down = [name for name, status in report["subsystems"].items() if status != RUNNING]
                log.warning("System health %s, not running: %s", report["status"], ", ".join(down))
            await asyncio.sleep(self.interval)

    @property
    def running(self):
        return self._task is not None and not self._task.done()

    def start(self):
        """Start polling on the running event loop."""
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._poll())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
