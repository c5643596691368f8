"""Email composer: form state and the simulated bulk send."""

import asyncio
import logging
from collections import deque
from datetime import UTC, datetime

from src.core.config import Constants, settings
from src.core.errors import FormValidationError
from src.core.logging import span
from src.domain.email import (
    ComposerState,
    EmailDraft,
    RecipientGroup,
    SentEmail,
    find_group,
    find_template,
)
from src.domain.notification import Notification, NotificationSeverity
from src.services.notification_service import NotificationSink


logger = logging.getLogger(__name__)


class EmailComposer:
    """Two-state (idle, sending) composer for one dashboard session.

    Sending is simulated: after a fixed delay the draft is reported as sent to
    the selected recipient group and the form is reset.
    """

    def __init__(self, *, notifier: NotificationSink, send_delay_seconds: float | None = None) -> None:
        self._notifier = notifier
        self._send_delay_seconds = (
            settings.email_send_delay_seconds if send_delay_seconds is None else send_delay_seconds
        )
        self.draft = EmailDraft()
        self.state = ComposerState.IDLE
        self._recent: deque[SentEmail] = deque(maxlen=Constants.RECENT_EMAILS_LIMIT)
        self._pending_group: RecipientGroup | None = None
        self._sent_total = 0

    @property
    def is_sending(self) -> bool:
        return self.state == ComposerState.SENDING

    @property
    def selected_group(self) -> RecipientGroup | None:
        return find_group(self.draft.group_id) if self.draft.group_id else None

    @property
    def recent_emails(self) -> list[SentEmail]:
        """Sent emails, newest first."""
        return list(self._recent)

    @property
    def sent_count(self) -> int:
        return self._sent_total

    def select_template(self, template_id: str | None) -> None:
        """Prefill subject and body from a template, overwriting any edits.

        ``None`` (or an empty id) clears the selection and leaves the text alone.
        """
        if not template_id:
            self.draft = self.draft.model_copy(update={"template_id": None})
            return

        template = find_template(template_id)
        if template is None:
            raise FormValidationError(f"Unknown email template: {template_id}")

        self.draft = self.draft.model_copy(
            update={"template_id": template.id, "subject": template.subject, "body": template.body}
        )
        logger.debug("Applied email template %s", template.id)

    def select_group(self, group_id: str | None) -> None:
        if group_id and find_group(group_id) is None:
            raise FormValidationError(f"Unknown recipient group: {group_id}")
        self.draft = self.draft.model_copy(update={"group_id": group_id or None})

    def set_subject(self, subject: str) -> None:
        self.draft = self.draft.model_copy(update={"subject": subject})

    def set_body(self, body: str) -> None:
        self.draft = self.draft.model_copy(update={"body": body})

    def _missing_fields(self) -> list[str]:
        missing = []
        if self.selected_group is None:
            missing.append("recipient group")
        if not self.draft.subject.strip():
            missing.append("subject")
        if not self.draft.body.strip():
            missing.append("message")
        return missing

    def start_send(self) -> bool:
        """Validate the draft and enter the sending state.

        Returns True when sending started. While already sending the request is
        ignored; an incomplete draft produces a validation notification.
        """
        if self.is_sending:
            logger.warning("Send requested while a send is in progress")
            return False

        missing = self._missing_fields()
        if missing:
            self._notifier.notify(
                Notification(
                    title="Missing Information",
                    description=f"Please fill in all required fields before sending: {', '.join(missing)}.",
                    severity=NotificationSeverity.DESTRUCTIVE,
                )
            )
            return False

        self._pending_group = self.selected_group
        self.state = ComposerState.SENDING
        logger.info("Email send started", extra={"group_id": self.draft.group_id})
        return True

    async def finish_send(self) -> SentEmail | None:
        """Wait out the simulated transmission, report it and reset the form."""
        group = self._pending_group
        if not self.is_sending or group is None:
            return None

        with span("email_composer.send"):
            await asyncio.sleep(self._send_delay_seconds)

            sent = SentEmail(
                subject=self.draft.subject,
                group_name=group.name,
                recipient_count=group.count,
                sent_at=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            )
            self._recent.appendleft(sent)
            self._sent_total += 1
            self._notifier.notify(
                Notification(
                    title="Email Sent Successfully!",
                    description=f"Email sent to {group.name} ({group.count} recipients)",
                )
            )

            self.draft = EmailDraft()
            self._pending_group = None
            self.state = ComposerState.IDLE
            logger.info("Email sent", extra={"group": group.id, "recipients": group.count})
            return sent

    async def send(self) -> SentEmail | None:
        """Validate, simulate transmission, and reset. Returns None if rejected."""
        if not self.start_send():
            return None
        return await self.finish_send()
