# appforge/lib/monitoring.py
from fastapi import FastAPI
from prometheus_client.registry import CollectorRegistry as Registry
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator
from appforge.core.logging import log

# Separate registry so tests can create several apps
registry = Registry()

active_agent_streams = Gauge(
    'appforge_active_agent_streams',
    'Number of agent turns currently streaming',
    registry=registry
)

model_fallbacks = Counter(
    'appforge_generation_fallbacks_total',
    'Turns whose generation node returned the fallback bundle',
    registry=registry
)

build_requests = Counter(
    'appforge_build_requests_total',
    'Build requests by outcome',
    ['outcome'],
    registry=registry
)


def register_monitoring(app: FastAPI):
    """
    Registers Prometheus request instrumentation and the /metrics endpoint.
    """
    instrumentator = Instrumentator(
        excluded_handlers=["/metrics"],
        registry=registry
    ).instrument(app)

    instrumentator.expose(app, include_in_schema=False, should_gzip=True)

    log("MONITORING", "Prometheus instrumentation registered at /metrics.")
