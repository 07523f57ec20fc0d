"""Validação de assinatura HMAC-SHA256 dos webhooks do provedor.

O provedor envia `x-payload-digest` = hex(HMAC-SHA256(secret, corpo)).
O HMAC é sempre calculado sobre os bytes exatos recebidos; re-serializar
o JSON parseado muda o layout e invalida a assinatura.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass

MISSING_SIGNATURE = "missing_signature"
VERIFICATION_SKIPPED = "verification_skipped"
SIGNATURE_MISMATCH = "signature_mismatch"


@dataclass(frozen=True, slots=True)
class SignatureResult:
    """Resultado da verificação de assinatura.

    Atributos:
        valid: Assinatura confere
        skipped: Verificação não executada (secret ausente)
        error: Código do erro (missing_signature|verification_skipped|signature_mismatch)
    """

    valid: bool
    skipped: bool = False
    error: str | None = None


def compute_payload_digest(payload: bytes, secret: str) -> str:
    """Calcula o digest hex esperado para o payload."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def constant_time_equals(expected: bytes, received: bytes) -> bool:
    """Compara digests sem vazar a posição do primeiro byte diferente.

    Tamanhos diferentes também passam por uma comparação completa contra um
    buffer zerado do tamanho esperado, para que o ramo de tamanho não mude o
    tempo total de forma observável.
    """
    if len(received) != len(expected):
        hmac.compare_digest(expected, bytes(len(expected)))
        return False
    return hmac.compare_digest(expected, received)


def verify(payload: bytes, claimed_signature: str | None, secret: str) -> bool:
    """Retorna True se `claimed_signature` é o HMAC-SHA256 hex de `payload`."""
    if not claimed_signature or not secret:
        return False
    computed = compute_payload_digest(payload, secret).encode("ascii")
    received = claimed_signature.encode("utf-8")
    return constant_time_equals(computed, received)


def verify_payload_digest(
    payload: bytes,
    claimed_signature: str | None,
    secret: str | None,
) -> SignatureResult:
    """Valida assinatura do webhook e classifica o resultado.

    Args:
        payload: Corpo bruto da requisição
        claimed_signature: Valor do header x-payload-digest
        secret: Secret do webhook (None/vazio = não configurado)

    Returns:
        SignatureResult; quem chama decide o que fazer com `skipped`.
    """
    if not secret:
        return SignatureResult(valid=False, skipped=True, error=VERIFICATION_SKIPPED)

    if not claimed_signature:
        return SignatureResult(valid=False, error=MISSING_SIGNATURE)

    if not verify(payload, claimed_signature, secret):
        return SignatureResult(valid=False, error=SIGNATURE_MISMATCH)

    return SignatureResult(valid=True)
