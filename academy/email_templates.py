"""Email bodies sent by the academy API"""

from datetime import datetime, timezone
from html import escape
from typing import Optional

ACADEMY_NAME = "Vigyanit Academy"


def password_reset_request_subject(identifier: str) -> str:
    return f"[{ACADEMY_NAME}] Password Reset Request - {identifier}"


def password_reset_request_text(
    identifier: str,
    user_email: Optional[str],
    user_found: bool,
    timestamp: Optional[datetime] = None,
) -> str:
    """Plain-text notice to the office; staff verify identity before resetting"""
    timestamp = timestamp or datetime.now(timezone.utc)
    lines = [
        "Password Reset Request",
        "",
        "A user has requested a password reset for their academy account.",
        "",
        f"Account Identifier: {identifier}",
        f"Email: {user_email or 'Not found in database'}",
        f"User Found: {'Yes' if user_found else 'No'}",
        f"Timestamp: {timestamp.isoformat()}",
        "",
        "Please contact the user to verify their identity and assist with password reset.",
    ]
    if not user_found:
        lines += [
            "",
            "Note: This identifier was not found in the system. "
            "Please verify the user's identity before proceeding.",
        ]
    lines += ["", f"This is an automated message from the {ACADEMY_NAME} portal."]
    return "\n".join(lines)


def contact_inquiry_subject(name: str) -> str:
    return f"New Contact Form Submission from {name}"


def contact_inquiry_html(name: str, email: str, phone: Optional[str], message: str) -> str:
    return (
        "<h2>New Contact Message</h2>"
        f"<p><strong>Name:</strong> {escape(name)}</p>"
        f"<p><strong>Email:</strong> {escape(email)}</p>"
        f"<p><strong>Phone:</strong> {escape(phone) if phone else 'Not provided'}</p>"
        "<p><strong>Message:</strong></p>"
        f"<p>{escape(message)}</p>"
    )


def announcement_subject(title: str, announcement_type: Optional[str]) -> str:
    label = (announcement_type or "announcement").upper()
    return f"[{label}] {title}"
