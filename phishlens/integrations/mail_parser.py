"""
Adapters that turn mail-source payloads into EmailInput.

Two shapes are supported: the message document returned by a Mailpit-style
capture service, and raw RFC 822 bytes (``.eml`` files). Fetching messages
is the caller's job.
"""

import email
import email.policy
import email.utils
import re
from email.message import EmailMessage
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from phishlens.config.logging import get_logger
from phishlens.schemas.email import (
    Attachment,
    Authentication,
    AuthStatus,
    EmailBody,
    EmailInput,
    Recipient,
    Sender,
)
from phishlens.services.interfaces import MalformedInputError

logger = get_logger(__name__)

DEFAULT_SUBJECT = "(No Subject)"
DEFAULT_SENDER = "unknown@unknown.com"

DMARC_RESULT = re.compile(r"\bdmarc=(\w+)", re.IGNORECASE)
DKIM_RESULT = re.compile(r"\bdkim=(\w+)", re.IGNORECASE)


def _header(headers: Mapping[str, Any], name: str) -> str:
    """Case-insensitive header lookup; list values are joined."""
    for key, value in headers.items():
        if key.lower() == name.lower():
            if isinstance(value, (list, tuple)):
                return " ".join(str(v) for v in value)
            return str(value or "")
    return ""


def _status(word: Optional[str]) -> AuthStatus:
    if not word:
        return AuthStatus.UNKNOWN
    word = word.lower()
    if word == "pass":
        return AuthStatus.PASS
    if word == "fail":
        return AuthStatus.FAIL
    return AuthStatus.UNKNOWN


def parse_authentication(headers: Optional[Mapping[str, Any]]) -> Authentication:
    """Derive DMARC/SPF/DKIM outcomes from message headers.

    DMARC and DKIM come from ``Authentication-Results``; SPF from
    ``Received-SPF``. Without a DKIM verdict, a ``DKIM-Signature`` header
    is taken as a pass.
    """
    if not headers:
        return Authentication()

    auth_results = _header(headers, "Authentication-Results")
    received_spf = _header(headers, "Received-SPF").lower()
    dkim_signature = _header(headers, "DKIM-Signature")

    dmarc_match = DMARC_RESULT.search(auth_results)
    dmarc = _status(dmarc_match.group(1)) if dmarc_match else AuthStatus.UNKNOWN

    if "pass" in received_spf:
        spf = AuthStatus.PASS
    elif "fail" in received_spf:
        spf = AuthStatus.FAIL
    else:
        spf = AuthStatus.UNKNOWN

    dkim_match = DKIM_RESULT.search(auth_results)
    if dkim_match:
        dkim = _status(dkim_match.group(1))
    elif dkim_signature:
        dkim = AuthStatus.PASS
    else:
        dkim = AuthStatus.UNKNOWN

    return Authentication(dmarc=dmarc, spf=spf, dkim=dkim)


def from_mailpit_message(message: Optional[Dict[str, Any]],
                         headers: Optional[Mapping[str, Any]] = None) -> EmailInput:
    """Convert a Mailpit message document into an EmailInput."""
    if not isinstance(message, dict):
        raise MalformedInputError("Mailpit message must be a mapping")

    sender = message.get("From") or {}
    if not isinstance(sender, dict):
        sender = {"Address": str(sender)}
    try:
        recipients = [
            Recipient(address=r.get("Address") or "", name=r.get("Name") or "")
            for r in message.get("To") or []
            if isinstance(r, dict)
        ]
        attachments = [
            Attachment(
                filename=a.get("FileName") or "",
                content_type=a.get("ContentType") or "application/octet-stream",
                size=a.get("Size") or 0,
            )
            for a in message.get("Attachments") or []
            if isinstance(a, dict)
        ]

        return EmailInput(
            subject=message.get("Subject") or DEFAULT_SUBJECT,
            sender=Sender(address=sender.get("Address") or DEFAULT_SENDER, name=sender.get("Name") or ""),
            recipients=recipients,
            body=EmailBody(text=message.get("Text") or "", html=message.get("HTML") or None),
            attachments=attachments,
            authentication=parse_authentication(headers if headers is not None else message.get("Headers")),
        )
    except ValidationError as e:
        raise MalformedInputError(f"Invalid Mailpit message: {e.errors()[0]['msg']}") from e


def _part_text(part: EmailMessage) -> str:
    try:
        return part.get_content()
    except (LookupError, UnicodeDecodeError):
        payload = part.get_payload(decode=True) or b""
        return payload.decode(errors="ignore")


def _is_attachment(part: EmailMessage) -> bool:
    """Explicit attachments, plus named non-text parts sent without a Content-Disposition."""
    if part.get_content_disposition() == "attachment":
        return True
    return bool(part.get_filename()) and part.get_content_maintype() != "text"


def parse_eml(raw: Union[bytes, str]) -> EmailInput:
    """Parse a raw RFC 822 message into an EmailInput."""
    if not isinstance(raw, (bytes, str)):
        raise MalformedInputError(f"Raw message must be bytes or str, got {type(raw).__name__}")
    if not raw.strip():
        raise MalformedInputError("Raw message is empty")

    if isinstance(raw, bytes):
        msg = email.message_from_bytes(raw, policy=email.policy.default)
    else:
        msg = email.message_from_string(raw, policy=email.policy.default)

    try:
        return _build_from_message(msg)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid raw message: {e.errors()[0]['msg']}") from e


def _build_from_message(msg: EmailMessage) -> EmailInput:
    name, address = email.utils.parseaddr(str(msg.get("From", "")))
    recipients: List[Recipient] = [
        Recipient(address=addr, name=rname)
        for rname, addr in email.utils.getaddresses([str(v) for v in msg.get_all("To", [])])
        if addr
    ]

    text, html = "", ""
    attachments: List[Attachment] = []
    for part in msg.walk():
        if part.is_multipart():
            continue
        if _is_attachment(part):
            payload = part.get_payload(decode=True) or b""
            attachments.append(Attachment(
                filename=part.get_filename() or "",
                content_type=part.get_content_type(),
                size=len(payload),
            ))
            continue
        content_type = part.get_content_type()
        if content_type == "text/plain":
            text += _part_text(part)
        elif content_type == "text/html":
            html += _part_text(part)

    headers = {key: str(value) for key, value in msg.items()}
    logger.debug("eml_parsed", attachments=len(attachments), has_html=bool(html))

    return EmailInput(
        subject=str(msg.get("Subject", "")),
        sender=Sender(address=address or DEFAULT_SENDER, name=name),
        recipients=recipients,
        body=EmailBody(text=text, html=html or None),
        attachments=attachments,
        authentication=parse_authentication(headers),
    )
