"""Observability layer: metrics and failure classification. No external SaaS."""

from app.observability.failure_classifier import FailureCategory, FailureClassifier
from app.observability.metrics import MetricsCollector

__all__ = [
    "FailureCategory",
    "FailureClassifier",
    "MetricsCollector",
]
