"""Observabilidade: correlation_id e métricas via logs estruturados.

Uso:
    from app.observability import get_correlation_id, set_correlation_id
    from app.observability import record_latency, record_pipeline_outcome
"""

from app.observability.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_delivery_failure,
    record_latency,
    record_pipeline_outcome,
    record_replay_summary,
)

__all__ = [
    "CORRELATION_ID_HEADER",
    "generate_correlation_id",
    "get_correlation_id",
    "record_delivery_failure",
    "record_latency",
    "record_pipeline_outcome",
    "record_replay_summary",
    "reset_correlation_id",
    "set_correlation_id",
]
