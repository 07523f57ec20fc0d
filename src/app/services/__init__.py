"""Serviços de aplicação.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.verification_status import VerificationStatusService

__all__ = [
    "VerificationStatusService",
]
