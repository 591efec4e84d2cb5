"""Learning recorder: keeps outcome records for the lifetime of the process."""

import time
from collections import deque

from agents.base import BaseSubsystem

MAX_RECORDS = 500


class LearningAgent(BaseSubsystem):
    """Bounded in-memory log of generation outcomes with a running success rate."""

    name = "learning"
    description = "Records generation outcomes"

    def __init__(self, max_records=MAX_RECORDS):
        super().__init__()
        self.records = deque(maxlen=max_records)

    async def record(self, prompt, options, files_generated, success):
        entry = {
            "prompt": prompt,
            "framework": (options or {}).get("framework"),
            "files_generated": files_generated,
            "success": success,
            "timestamp": time.time(),
        }
        self.records.append(entry)
        return {"recorded": True, "total": len(self.records), "success_rate": self.success_rate()}

    def success_rate(self):
        if not self.records:
            return 0.0
        return round(sum(1 for r in self.records if r["success"]) / len(self.records), 3)
