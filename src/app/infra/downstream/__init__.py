"""Entrega ao sistema de registro downstream."""

from .forwarder import DownstreamForwarder, build_downstream_payload, create_downstream_forwarder

__all__ = [
    "DownstreamForwarder",
    "build_downstream_payload",
    "create_downstream_forwarder",
]
