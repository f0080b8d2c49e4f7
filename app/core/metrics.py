"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry
import time
from functools import wraps
from typing import Callable

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

quotes_calculated = Counter(
    'quotes_calculated_total',
    'Total quotes calculated',
    ['kind', 'van_size'],
    registry=registry
)

distance_estimates = Counter(
    'distance_estimates_total',
    'Total distance estimates by the strategy that produced them',
    ['source'],
    registry=registry
)

routing_requests = Counter(
    'routing_requests_total',
    'Total external routing lookups',
    ['status'],
    registry=registry
)

routing_duration = Histogram(
    'routing_request_duration_seconds',
    'External routing lookup duration in seconds',
    ['status'],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0),
    registry=registry
)

cache_hits = Counter(
    'cache_hits_total',
    'Total cache hits',
    ['cache_key'],
    registry=registry
)

cache_misses = Counter(
    'cache_misses_total',
    'Total cache misses',
    ['cache_key'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


def track_routing(func: Callable) -> Callable:
    """Decorator to record outcome and latency of a routing lookup"""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = await func(*args, **kwargs)
            duration = time.time() - start_time
            routing_requests.labels(status='success').inc()
            routing_duration.labels(status='success').observe(duration)
            return result
        except Exception:
            duration = time.time() - start_time
            routing_requests.labels(status='error').inc()
            routing_duration.labels(status='error').observe(duration)
            raise
    return wrapper


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    from prometheus_client import generate_latest
    return generate_latest(registry).decode('utf-8')
