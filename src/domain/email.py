"""Email composer domain models and the fixed catalogs."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ComposerState(StrEnum):
    """Email composer state machine states."""

    IDLE = "idle"
    SENDING = "sending"


class EmailTemplate(BaseModel):
    """A named (subject, default body) pair used to prefill the composer."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    subject: str
    body: str


class RecipientGroup(BaseModel):
    """A pre-counted segment of event attendees."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    count: int = Field(..., ge=0, description="Number of members in the group")


class EmailDraft(BaseModel):
    """Ephemeral composer form state."""

    template_id: str | None = None
    group_id: str | None = None
    subject: str = ""
    body: str = ""


class SentEmail(BaseModel):
    """Record of a (simulated) bulk send, shown under "Recent Emails"."""

    subject: str
    group_name: str
    recipient_count: int
    sent_at: str = Field(..., description="Send timestamp (ISO format)")


EMAIL_TEMPLATES: tuple[EmailTemplate, ...] = (
    EmailTemplate(
        id="welcome",
        name="Welcome Message",
        subject="Welcome to our Event!",
        body=(
            "Welcome to our upcoming event! We're excited to have you join us. "
            "Please find attached the event details and schedule."
        ),
    ),
    EmailTemplate(
        id="reminder",
        name="Event Reminder",
        subject="Don't forget - Event Tomorrow!",
        body=(
            "This is a friendly reminder about our event tomorrow. "
            "Don't forget to bring your confirmation email and ID."
        ),
    ),
    EmailTemplate(
        id="update",
        name="Event Update",
        subject="Important Event Update",
        body="We have an important update regarding our upcoming event. Please read the details below carefully.",
    ),
    EmailTemplate(
        id="thank-you",
        name="Thank You",
        subject="Thank you for attending!",
        body=(
            "Thank you for attending our event! We hope you had a great experience. "
            "Please share your feedback with us."
        ),
    ),
)

RECIPIENT_GROUPS: tuple[RecipientGroup, ...] = (
    RecipientGroup(id="all", name="All Attendees", count=342),
    RecipientGroup(id="vip", name="VIP Guests", count=25),
    RecipientGroup(id="speakers", name="Speakers", count=8),
    RecipientGroup(id="sponsors", name="Sponsors", count=12),
    RecipientGroup(id="unconfirmed", name="Unconfirmed", count=45),
)

ALL_ATTENDEES_GROUP_ID = "all"


def find_template(template_id: str) -> EmailTemplate | None:
    return next((t for t in EMAIL_TEMPLATES if t.id == template_id), None)


def find_group(group_id: str) -> RecipientGroup | None:
    return next((g for g in RECIPIENT_GROUPS if g.id == group_id), None)
