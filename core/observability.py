"""Observability Module - Logging, Tracing, and Metrics

This module provides:
1. Logging configuration shared by every module logger
2. Tracing of the estimation provider call
3. Estimation metrics (provider successes vs. fallbacks, latency)
"""
import time
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

from config.settings import LOG_LEVEL

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, str(LOG_LEVEL).upper(), logging.INFO),
    format='%(asctime)s | %(name)s | %(levelname)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger("lifeweeks")


@dataclass
class EstimationTrace:
    """A single timed step (usually the provider call)."""
    step_name: str
    start_time: datetime = field(default_factory=datetime.now)
    started_at: float = field(default_factory=time.perf_counter)
    duration_ms: Optional[float] = None
    input_summary: str = ""
    success: bool = True
    used_fallback: bool = False
    error: Optional[str] = None

    def complete(self, success: bool = True, error: str = None):
        """Mark trace as complete."""
        self.duration_ms = (time.perf_counter() - self.started_at) * 1000
        self.success = success
        self.error = error


@dataclass
class EstimationMetrics:
    """Aggregated metrics across estimation requests."""
    total_requests: int = 0
    provider_successes: int = 0
    fallbacks: int = 0
    total_latency_ms: float = 0
    step_latencies: Dict[str, list] = field(default_factory=dict)

    @property
    def fallback_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.fallbacks / self.total_requests

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    def record(self, trace: EstimationTrace):
        """Record a trace into metrics."""
        self.total_requests += 1
        if trace.success and not trace.used_fallback:
            self.provider_successes += 1
        else:
            self.fallbacks += 1

        if trace.duration_ms is not None:
            self.total_latency_ms += trace.duration_ms
            self.step_latencies.setdefault(trace.step_name, []).append(trace.duration_ms)

    def summary(self) -> Dict[str, Any]:
        step_avg = {
            step: sum(latencies) / len(latencies)
            for step, latencies in self.step_latencies.items()
            if latencies
        }
        return {
            "total_requests": self.total_requests,
            "provider_successes": self.provider_successes,
            "fallbacks": self.fallbacks,
            "fallback_rate": f"{self.fallback_rate:.1%}",
            "avg_latency_ms": f"{self.avg_latency_ms:.0f}ms",
            "step_avg_latency": step_avg,
        }

    def reset(self):
        self.total_requests = 0
        self.provider_successes = 0
        self.fallbacks = 0
        self.total_latency_ms = 0
        self.step_latencies = {}


# Process-wide metrics (reporting only, never read by estimation logic)
metrics = EstimationMetrics()


class Tracer:
    """Context manager for tracing one estimation step.

    Exceptions are recorded and re-raised. A caller that recovers with a
    fallback marks it on the yielded trace (trace.used_fallback = True).
    """

    def __init__(self, step_name: str, input_data: Any = None, registry: EstimationMetrics = None):
        self.trace = EstimationTrace(step_name=step_name)
        self.registry = registry if registry is not None else metrics
        if input_data:
            self.trace.input_summary = str(input_data)[:200]

    def __enter__(self):
        logger.info(f"▶ {self.trace.step_name} started")
        return self.trace

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.trace.complete(success=False, error=str(exc_val))
            logger.error(f"✖ {self.trace.step_name} failed: {exc_val}")
        else:
            self.trace.complete(success=True)
            suffix = " (fallback)" if self.trace.used_fallback else ""
            logger.info(f"✔ {self.trace.step_name} completed in {self.trace.duration_ms:.0f}ms{suffix}")

        self.registry.record(self.trace)
        return False  # Don't suppress exceptions


def get_metrics_summary() -> Dict[str, Any]:
    """Get current metrics summary."""
    return metrics.summary()
