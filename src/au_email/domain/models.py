"""Domain models for au_email: the enqueue side of the email outbox."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.au_common.enums import EmailKind, EmailStatus


@dataclass(frozen=True)
class EmailRecipient:
    email: str
    name: str | None = None


@dataclass
class EmailJob:
    """One row of the outbox. The external sender owns status and retries."""

    id: str
    kind: EmailKind
    recipient_email: str
    subject: str
    recipient_name: str | None = None
    template_data: dict[str, Any] = field(default_factory=dict)
    status: EmailStatus = EmailStatus.PENDING
    retry_count: int = 0
    last_error: str | None = None
    created_at: datetime | None = None
