"""Connectors: adapters de borda para APIs externas.

Estrutura:
- sumsub/: assinatura de webhooks e API de status do provedor

Cada provedor tem seu próprio connector, garantindo isolamento de falhas.
"""

__all__: list[str] = []
