"""
Prometheus collectors for SwimDesk.

Service timings are fed by ``BaseService.measure_operation``; the domain
counters follow catch-up requests, credits and outbox deliveries.
"""

from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

# Own registry so app reloads and test runs never register a collector twice
REGISTRY = CollectorRegistry()

OPERATION_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)

operation_seconds = Histogram(
    "swimdesk_service_operation_duration_seconds",
    "Time spent in measured service methods",
    ["service", "operation"],
    buckets=OPERATION_BUCKETS,
    registry=REGISTRY,
)
operations_total = Counter(
    "swimdesk_service_operations_total",
    "Measured service method calls by outcome",
    ["service", "operation", "status"],
    registry=REGISTRY,
)
operation_errors_total = Counter(
    "swimdesk_errors_total",
    "Measured service method failures by exception type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)
catch_up_transitions_total = Counter(
    "swimdesk_catch_up_transitions_total",
    "Catch-up request status changes",
    ["transition"],  # requested | approved | rejected | auto_approved | booked
    registry=REGISTRY,
)
catch_up_credits_total = Counter(
    "swimdesk_catch_up_credits_total",
    "Catch-up credits granted and consumed",
    ["direction"],  # granted | consumed
    registry=REGISTRY,
)
outbox_deliveries_total = Counter(
    "swimdesk_notifications_outbox_total",
    "Outbox delivery attempts by result",
    ["status", "event_type"],  # sent | retried | failed
    registry=REGISTRY,
)


class PrometheusMetrics:
    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        operation_seconds.labels(service=service, operation=operation).observe(duration)
        operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            operation_errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_catch_up_transition(transition: str, count: int = 1) -> None:
        # Bulk actions that matched nothing record nothing
        if count:
            catch_up_transitions_total.labels(transition=transition).inc(count)

    @staticmethod
    def record_credit(direction: str, amount: int = 1) -> None:
        if amount:
            catch_up_credits_total.labels(direction=direction).inc(amount)

    @staticmethod
    def record_notification_outcome(event_type: str, status: str) -> None:
        outbox_deliveries_total.labels(status=status, event_type=event_type).inc()

    @staticmethod
    def exposition() -> bytes:
        """Current registry in the text exposition format."""
        return generate_latest(REGISTRY)

    content_type = CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
