"""App — coração do sistema: orquestração, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- coordinators/: fluxo inbound com contexto de correlação e tenant
- use_cases/: casos de uso (inputs/outputs, sem IO direto)
- services/: roteamento de canais, resolver e programa de parceiros
- scheduling/: agendador de jobs em lote
- infra/: implementações concretas de IO (HTTP, stores)
- protocols/: contratos/interfaces
- domain/: modelos e erros de domínio
- observability/: correlation_id, tenant e métricas em log

Padrão: app executa; api adapta; utils apoia.
"""
