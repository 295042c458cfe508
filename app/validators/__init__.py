"""
app/validators package marker.
"""

from app.validators.metric_normalizer import (
    MetricNormalizer,
    coerce_metric,
    parse_float_prefix,
    parse_int_prefix,
)

__all__ = [
    "MetricNormalizer",
    "coerce_metric",
    "parse_float_prefix",
    "parse_int_prefix",
]
