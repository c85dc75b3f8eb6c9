# -*- coding: utf-8 -*-
"""
Prometheus metrics for the backoffice.

HTTP request counters/histograms are recorded by middleware; the license,
moderation and report services record their own domain counters through
``get_metrics_service()``. Each app owns its own CollectorRegistry so that
several apps (tests, CLI scripts) can coexist in one process.
"""

import time
from typing import Optional
from flask import Flask, request, g, current_app, has_app_context
from prometheus_client import CollectorRegistry, Counter, Histogram
from prometheus_client.exposition import generate_latest, CONTENT_TYPE_LATEST


def init_metrics(app: Flask) -> None:
    """Initialize metrics service and the /metrics endpoint."""
    service = MetricsService(enabled=app.config.get("BACKOFFICE_METRICS_ENABLED", True))
    app.extensions['metrics'] = service

    if service.enabled:
        @app.before_request
        def _metrics_start_timer():
            g.metrics_start_time = time.time()

        @app.after_request
        def _metrics_record(response):
            start = getattr(g, 'metrics_start_time', None)
            if start is not None:
                service.record_http_request(
                    route=request.url_rule.rule if request.url_rule else request.path,
                    method=request.method,
                    status_code=response.status_code,
                    duration_seconds=time.time() - start
                )
            return response

        @app.route("/metrics")
        def metrics():
            return generate_latest(service.registry), 200, {'Content-Type': CONTENT_TYPE_LATEST}


def get_metrics_service() -> Optional['MetricsService']:
    """Get the metrics service instance from the current app context."""
    if has_app_context():
        return current_app.extensions.get('metrics')
    return None


class MetricsService:
    """Owns the app's Prometheus collectors."""

    def __init__(self, registry: Optional[CollectorRegistry] = None, enabled: bool = True):
        self.enabled = enabled
        self.registry = registry if registry is not None else CollectorRegistry()

        if self.enabled:
            self.http_requests_total = Counter(
                "backoffice_http_requests_total",
                "Total number of HTTP requests.",
                ["route", "method", "status"],
                registry=self.registry
            )
            self.http_request_duration_seconds = Histogram(
                "backoffice_http_request_duration_seconds",
                "Duration of HTTP requests in seconds.",
                ["route", "method"],
                registry=self.registry
            )
            self.license_approvals_total = Counter(
                "backoffice_license_approvals_total",
                "Order approval attempts by outcome.",
                ["outcome"],
                registry=self.registry
            )
            self.license_activations_total = Counter(
                "backoffice_license_activations_total",
                "License activation attempts by outcome.",
                ["outcome"],
                registry=self.registry
            )
            self.report_events_total = Counter(
                "backoffice_report_events_total",
                "Gameplay report events processed.",
                ["event"],
                registry=self.registry
            )
            self.device_warnings_total = Counter(
                "backoffice_device_warnings_total",
                "Accounts flagged through device-wide warnings.",
                registry=self.registry
            )

    def record_http_request(self, route: str, method: str, status_code: int, duration_seconds: float):
        if self.enabled:
            self.http_requests_total.labels(route=route, method=method, status=status_code).inc()
            self.http_request_duration_seconds.labels(route=route, method=method).observe(duration_seconds)

    def record_approval(self, outcome: str):
        if self.enabled:
            self.license_approvals_total.labels(outcome=outcome).inc()

    def record_activation(self, outcome: str):
        if self.enabled:
            self.license_activations_total.labels(outcome=outcome).inc()

    def record_report_event(self, event: str):
        if self.enabled:
            self.report_events_total.labels(event=event).inc()

    def record_device_warning(self, affected_accounts: int):
        if self.enabled and affected_accounts:
            self.device_warnings_total.inc(affected_accounts)
