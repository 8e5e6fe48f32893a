"""Performance monitoring utilities using Prometheus metrics."""

from __future__ import annotations

import time
from contextlib import contextmanager

import psutil
from prometheus_client import Counter, Histogram


picks_total = Counter("picker_picks_total", "Pick attempts by outcome", labelnames=("outcome",))
room_draws_total = Counter("picker_room_draws_total", "Room draw attempts by outcome", labelnames=("outcome",))
notifications_total = Counter(
    "picker_notifications_total",
    "Outbound notifications by transport and result",
    labelnames=("service", "result"),
)
draw_duration = Histogram("picker_draw_duration_seconds", "Time spent inside a draw critical section")


class PerformanceMonitor:
    """Domain counters plus process readings for the health endpoint."""

    @contextmanager
    def track_draw(self):
        start = time.perf_counter()
        try:
            yield
        finally:
            draw_duration.observe(time.perf_counter() - start)

    def record_pick(self, outcome: str) -> None:
        picks_total.labels(outcome=outcome).inc()

    def record_room_draw(self, outcome: str) -> None:
        room_draws_total.labels(outcome=outcome).inc()

    def record_notification(self, service: str, delivered: bool) -> None:
        notifications_total.labels(service=service, result="delivered" if delivered else "failed").inc()

    def gather_host_metrics(self) -> dict:
        process = psutil.Process()
        memory_info = process.memory_info()
        return {
            "memory_rss": memory_info.rss,
            "cpu_percent": process.cpu_percent(interval=None),
        }


monitor = PerformanceMonitor()
