"""Base class for subsystems registered with the orchestrator."""

from enum import Enum


class SubsystemStatus(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    ERROR = "error"


class BaseSubsystem:
    """Lifecycle and status reporting shared by every default subsystem.

    Subsystems are constructed ready to use; ``stop`` and ``start`` exist so
    the health monitor sees an accurate picture when one is taken offline.
    """

    name = "base"
    description = "Base subsystem"

    def __init__(self):
        self.status = SubsystemStatus.RUNNING

    def get_status(self):
        return self.status

    async def start(self):
        self.status = SubsystemStatus.RUNNING

    async def stop(self):
        self.status = SubsystemStatus.STOPPED
