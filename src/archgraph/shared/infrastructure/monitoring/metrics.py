"""
Metrics collection and monitoring for ArchGraph.
"""

import threading
import time
from collections import defaultdict
from functools import wraps
from typing import Any, Dict, List, Optional


def _tag_key(tags: Dict[str, str]) -> str:
    return ",".join(f"{key}={tags[key]}" for key in sorted(tags))


class MetricsCollector:
    """
    Collects counters and timings for graph editing operations.

    Counters keep a running total plus a breakdown per tag set; timers keep
    the most recent ``max_history`` durations for summary statistics.
    """

    def __init__(self, max_history: int = 1000):
        self._lock = threading.RLock()

        self._counters: Dict[str, int] = defaultdict(int)
        self._tagged_counters: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._timers: Dict[str, List[float]] = defaultdict(list)

        self.max_history = max_history

    def counter(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name
            value: Increment value
            tags: Optional tags, counted separately per distinct set
        """
        with self._lock:
            self._counters[name] += value
            if tags:
                self._tagged_counters[name][_tag_key(tags)] += value

    def timer(self, name: str, duration_seconds: float) -> None:
        """
        Record a timing metric.

        Args:
            name: Timer name
            duration_seconds: Duration in seconds
        """
        with self._lock:
            self._timers[name].append(duration_seconds)

            # Keep only recent timings
            if len(self._timers[name]) > self.max_history:
                self._timers[name] = self._timers[name][-self.max_history:]

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> int:
        """Get a counter total, or its value for one tag set."""
        with self._lock:
            if tags:
                return self._tagged_counters.get(name, {}).get(_tag_key(tags), 0)
            return self._counters.get(name, 0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Get timer statistics."""
        with self._lock:
            timings = list(self._timers.get(name, []))

        if not timings:
            return {
                'count': 0,
                'mean': 0.0,
                'min': 0.0,
                'max': 0.0,
                'p95': 0.0,
                'p99': 0.0
            }

        sorted_timings = sorted(timings)
        count = len(sorted_timings)

        return {
            'count': count,
            'mean': sum(sorted_timings) / count,
            'min': sorted_timings[0],
            'max': sorted_timings[-1],
            'p95': sorted_timings[int(0.95 * count)],
            'p99': sorted_timings[int(0.99 * count)],
        }

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all current metric values."""
        with self._lock:
            return {
                'counters': dict(self._counters),
                'tagged_counters': {name: dict(values) for name, values in self._tagged_counters.items()},
                'timers': {name: self.get_timer_stats(name) for name in self._timers},
            }

    def record_api_request(self,
                          endpoint: str,
                          method: str,
                          duration_seconds: float,
                          status_code: int) -> None:
        """Record API request metrics."""
        tags = {
            'endpoint': endpoint,
            'method': method,
            'status_code': str(status_code)
        }

        self.counter('api_requests_total', tags=tags)
        self.timer('api_request_duration', duration_seconds)

    def record_merge(self,
                     added_nodes: int,
                     updated_nodes: int,
                     removed_nodes: int,
                     added_edges: int,
                     removed_edges: int,
                     dropped_edges: int,
                     duration_seconds: float) -> None:
        """Record the outcome of one delta merge."""
        self.counter('merges_total')
        self.counter('merge_nodes_added', added_nodes)
        self.counter('merge_nodes_updated', updated_nodes)
        self.counter('merge_nodes_removed', removed_nodes)
        self.counter('merge_edges_added', added_edges)
        self.counter('merge_edges_removed', removed_edges)
        if dropped_edges:
            self.counter('merge_edges_dropped', dropped_edges)
        self.timer('merge_duration', duration_seconds)

    def record_model_inference(self,
                             provider: str,
                             model_name: str,
                             duration_seconds: float,
                             success: bool = True) -> None:
        """Record model inference metrics."""
        tags = {'provider': provider, 'model': model_name}

        self.counter('model_inferences_total', tags=tags)
        if not success:
            self.counter('model_inference_failures_total', tags=tags)
        self.timer('model_inference_duration', duration_seconds)


def timed_operation(metric_name: str):
    """
    Decorator for timing operations.

    Successful calls are recorded under ``metric_name``; calls that raise
    are recorded under ``<metric_name>_error`` and counted by exception type.

    Args:
        metric_name: Name of the timing metric
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            metrics = get_metrics()
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
                metrics.timer(metric_name, time.time() - start_time)
                return result

            except Exception as e:
                metrics.timer(f"{metric_name}_error", time.time() - start_time)
                metrics.counter(f"{metric_name}_errors_total", tags={'error': type(e).__name__})
                raise

        return wrapper
    return decorator


# Global instance
_metrics_collector = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector instance.

    Returns:
        MetricsCollector shared by the process
    """
    global _metrics_collector

    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()

    return _metrics_collector
