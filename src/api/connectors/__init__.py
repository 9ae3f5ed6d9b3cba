"""Connectors por canal — adapters de borda para APIs externas.

Estrutura:
- whatsapp/: WhatsApp Cloud API
- instagram/: Instagram Messaging (Graph API)
- telegram/: Telegram Bot API
- meta_shared/: cliente Graph, erros e assinatura comuns à Meta
- webhook/: challenge e parsing de webhooks

Cada canal tem seu próprio connector, garantindo isolamento de falhas.
"""

__all__: list[str] = []
