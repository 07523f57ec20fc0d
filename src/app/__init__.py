"""App: coração do sistema: orquestração, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: modelos de domínio (eventos, status, dead-letter, entrega)
- use_cases/: pipeline do webhook e replay do dead-letter
- services/: serviço de status (read-through) e reset de perfil
- infra/: implementações concretas de IO (stores, HTTP, downstream)
- protocols/: contratos/interfaces
- observability/: correlation_id e métricas via logs

Padrão: app executa; api adapta; config configura; utils apoia.
"""
