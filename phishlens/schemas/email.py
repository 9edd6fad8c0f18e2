"""Email schemas consumed by the framework analyzers."""

from email.utils import parseaddr
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from phishlens.services.interfaces import MalformedInputError


class AuthStatus(str, Enum):
    """Outcome of a single sender authentication mechanism."""
    PASS = "pass"
    FAIL = "fail"
    UNKNOWN = "unknown"


class Sender(BaseModel):
    """Envelope sender: address plus optional display name."""
    model_config = ConfigDict(frozen=True)

    address: str = Field(..., max_length=320)
    name: str = ""

    @property
    def domain(self) -> str:
        """Domain part of the address, lower-cased; empty if there is no '@'."""
        if "@" not in self.address:
            return ""
        return self.address.split("@", 1)[1].strip().lower()


class Recipient(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    name: str = ""


class EmailBody(BaseModel):
    """Plain text body plus optional HTML alternative."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    html: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def none_text_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str = ""
    content_type: str = "application/octet-stream"
    size: int = Field(default=0, ge=0)

    @field_validator("filename", mode="before")
    @classmethod
    def none_filename_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Authentication(BaseModel):
    """DMARC/SPF/DKIM outcomes; anything not recognised is ``unknown``."""
    model_config = ConfigDict(frozen=True)

    dmarc: AuthStatus = AuthStatus.UNKNOWN
    spf: AuthStatus = AuthStatus.UNKNOWN
    dkim: AuthStatus = AuthStatus.UNKNOWN

    @field_validator("dmarc", "spf", "dkim", mode="before")
    @classmethod
    def coerce_status(cls, v: Any) -> AuthStatus:
        # Stored documents nest the status: {"status": "fail", "details": "..."}
        if isinstance(v, dict):
            v = v.get("status")
        if isinstance(v, AuthStatus):
            return v
        if isinstance(v, str):
            try:
                return AuthStatus(v.strip().lower())
            except ValueError:
                return AuthStatus.UNKNOWN
        return AuthStatus.UNKNOWN


def _parse_address(value: str) -> Dict[str, str]:
    """Split "Name <addr@host>" into its parts; bare addresses pass through."""
    name, address = parseaddr(value)
    return {"address": address or value.strip(), "name": name}


class EmailInput(BaseModel):
    """Read-only email handed to the scoring engine."""
    model_config = ConfigDict(frozen=True)

    subject: str = ""
    sender: Sender
    recipients: List[Recipient] = Field(default_factory=list)
    body: EmailBody = Field(default_factory=EmailBody)
    attachments: List[Attachment] = Field(default_factory=list)
    authentication: Authentication = Field(default_factory=Authentication)

    @field_validator("subject", mode="before")
    @classmethod
    def none_subject_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("body", mode="before")
    @classmethod
    def none_body_is_empty(cls, v: Any) -> Any:
        if v is None:
            return EmailBody()
        if isinstance(v, str):
            return EmailBody(text=v)
        return v

    @field_validator("authentication", mode="before")
    @classmethod
    def none_authentication_is_unknown(cls, v: Any) -> Any:
        return Authentication() if v is None else v

    @property
    def combined_text(self) -> str:
        """Subject and plain text body joined by a single space."""
        return f"{self.subject} {self.body.text}"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EmailInput":
        """Build an EmailInput from a stored email document.

        Accepts both the document shape (``from``, ``to``, ``contentType``)
        and this model's own field names.
        """
        if data is None:
            raise MalformedInputError("Email document is missing")
        if not isinstance(data, dict):
            raise MalformedInputError(f"Email document must be a mapping, got {type(data).__name__}")

        sender = data.get("sender", data.get("from"))
        if isinstance(sender, str):
            sender = _parse_address(sender)
        recipients = data.get("recipients", data.get("to")) or []
        recipients = [_parse_address(r) if isinstance(r, str) else r for r in recipients]
        attachments = []
        for att in data.get("attachments") or []:
            if isinstance(att, dict) and "contentType" in att:
                att = {**att, "content_type": att["contentType"]}
                att.pop("contentType")
            attachments.append(att)

        try:
            return cls(
                subject=data.get("subject"),
                sender=sender,
                recipients=recipients,
                body=data.get("body"),
                attachments=attachments,
                authentication=data.get("authentication"),
            )
        except ValidationError as e:
            raise MalformedInputError(f"Invalid email document: {e.errors()[0]['msg']}") from e


__all__ = [
    "AuthStatus",
    "Sender",
    "Recipient",
    "EmailBody",
    "Attachment",
    "Authentication",
    "EmailInput",
]
