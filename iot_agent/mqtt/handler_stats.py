"""Statistics for the uplink message handler."""

from __future__ import annotations


class HandlerStats:
    """Counters mirrored from the Prometheus metrics for health checks."""

    def __init__(self):
        self.received = 0
        self.decoded = 0
        self.failed = 0
        self.objects = 0
        self.last_message_at: float = 0
        self.failures_by_status: dict[str, int] = {}

    def record_failure(self, status: str) -> None:
        self.failed += 1
        self.failures_by_status[status] = self.failures_by_status.get(status, 0) + 1

    def __str__(self) -> str:
        return (
            f"Stats: received={self.received} decoded={self.decoded} "
            f"failed={self.failed} objects={self.objects}"
        )

    def to_dict(self) -> dict:
        return {
            "received": self.received,
            "decoded": self.decoded,
            "failed": self.failed,
            "objects": self.objects,
            "failures_by_status": dict(self.failures_by_status),
            "last_message_at": self.last_message_at,
        }
