"""API: camada de borda e adapters do provedor.

Responsabilidades:
- Receber webhooks do provedor de verificação
- Validar assinaturas sobre os bytes exatos recebidos
- Normalizar payloads para eventos canônicos
- Consultar a API de status do provedor

Subpastas:
- connectors/: assinatura de webhook e cliente HTTP do provedor
- normalizers/: conversão de payloads externos → eventos canônicos
- routes/: endpoints HTTP (webhook, admin, health)

NÃO PODE conter: regras de cache, política de dead-letter, orquestração de use cases.
"""
