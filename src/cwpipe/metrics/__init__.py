from .metrics import MetricsCollector, SessionMetrics

__all__ = ["MetricsCollector", "SessionMetrics"]
