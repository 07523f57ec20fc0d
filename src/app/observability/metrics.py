"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e agregadas depois pelo
sistema de logs (ex.: Cloud Logging, CloudWatch Insights).

Métricas suportadas:
- Latência: histogram de tempos de execução por componente/operação
- Pipeline: counter de desfechos do pipeline de webhook por estado final
- Entrega: counter de falhas de entrega ao downstream por tipo
- Replay: resumo de cada passada de replay do dead-letter

Uso:
    start = time.perf_counter()
    # ... operação ...
    latency_ms = (time.perf_counter() - start) * 1000
    record_latency("pipeline", "process_event", latency_ms, correlation_id)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "pipeline", "forwarder")
        operation: Nome da operação (ex: "process_event", "replay")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
        },
    )


def record_pipeline_outcome(
    state: str,
    event_type: str | None = None,
    correlation_id: str | None = None,
    reason: str | None = None,
) -> None:
    """Registra desfecho terminal do pipeline.

    Args:
        state: Estado final (Delivered, Rejected, Quarantined)
        event_type: Tipo canônico, quando a normalização chegou a acontecer
        correlation_id: ID de correlação para rastreamento
        reason: Motivo de rejeição ou quarentena
    """
    logger.info(
        "metric_pipeline_outcome",
        extra={
            "metric_type": "pipeline_outcome",
            "component": "pipeline",
            "state": state,
            "event_type": event_type,
            "reason": reason,
            "correlation_id": correlation_id,
        },
    )


def record_delivery_failure(
    failure_kind: str,
    detail: str,
    correlation_id: str | None = None,
    status_code: int | None = None,
) -> None:
    """Registra falha de entrega ao downstream.

    Args:
        failure_kind: Transient ou Permanent
        detail: Código curto da falha (ex: "downstream_timeout")
        correlation_id: ID de correlação para rastreamento
        status_code: Status HTTP do downstream, se houve resposta
    """
    logger.info(
        "metric_delivery_failure",
        extra={
            "metric_type": "delivery_failure",
            "component": "forwarder",
            "failure_kind": failure_kind,
            "detail": detail,
            "status_code": status_code,
            "correlation_id": correlation_id,
        },
    )


def record_replay_summary(
    delivered: int,
    failed: int,
    skipped: int,
    correlation_id: str | None = None,
) -> None:
    """Registra resumo de uma passada de replay."""
    logger.info(
        "metric_replay_summary",
        extra={
            "metric_type": "replay_summary",
            "component": "dead_letter",
            "delivered": delivered,
            "failed": failed,
            "skipped": skipped,
            "correlation_id": correlation_id,
        },
    )
