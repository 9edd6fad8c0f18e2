"""External collaborators: text generation and mail-source adapters."""

from phishlens.integrations.mail_parser import from_mailpit_message, parse_authentication, parse_eml
from phishlens.integrations.ollama import OllamaClient, create_ollama_client

__all__ = [
    "OllamaClient",
    "create_ollama_client",
    "from_mailpit_message",
    "parse_authentication",
    "parse_eml",
]
