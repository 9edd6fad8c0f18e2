from phishlens.schemas.email import (
    Attachment,
    Authentication,
    AuthStatus,
    EmailBody,
    EmailInput,
    Recipient,
    Sender,
)

__all__ = [
    "Attachment",
    "Authentication",
    "AuthStatus",
    "EmailBody",
    "EmailInput",
    "Recipient",
    "Sender",
]
