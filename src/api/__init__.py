"""API — camada de borda e adapters de canais.

Responsabilidades:
- Receber requests de canais externos (webhooks)
- Validar assinaturas e payloads
- Normalizar dados para modelos internos
- Construir payloads para APIs externas

Subpastas:
- connectors/: adapters HTTP por canal
- normalizers/: conversão de payloads externos → modelos internos
- payload_builders/: construção de payloads para APIs externas
- routes/: endpoints HTTP por canal (webhooks, health, admin)

NÃO PODE conter: regras de plano, persistência de CRM, orquestração de use cases.
"""
