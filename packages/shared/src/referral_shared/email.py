"""Email sending module using Resend.

Handles the two notifications sent after a referral is committed:
- Admin summary email (referrer and referee details)
- Referee email (welcome to the program, naming the referrer)

In direct mode the referee email becomes a confirmation to the submitter.

Uses Resend API for delivery. The SDK is synchronous, so each send runs
on a worker thread and both notifications are awaited together.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from html import escape

import resend

from referral_shared.schemas import NotificationReport, ReferralOut, ReferrerOut

logger = logging.getLogger("referral-email")

ADMIN_SUBJECT = "New Referral Submission"
REFEREE_SUBJECT = "You have been referred to our program"
CONFIRMATION_SUBJECT = "We received your referral"


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class EmailConfig:
    """Email service configuration."""

    api_key: str
    from_email: str
    from_name: str = "Referral Program"
    admin_email: str | None = None

    @classmethod
    def from_env(cls) -> "EmailConfig":
        """Load email config from environment variables."""
        api_key = os.getenv("RESEND_API_KEY", "")
        from_email = os.getenv("RESEND_FROM_EMAIL", "noreply@example.com")
        from_name = os.getenv("RESEND_FROM_NAME", "Referral Program")
        admin_email = os.getenv("ADMIN_EMAIL") or None

        if not api_key:
            logger.warning("RESEND_API_KEY not set - emails will fail")
        if not admin_email:
            logger.warning("ADMIN_EMAIL not set - admin notifications will fail")

        return cls(
            api_key=api_key,
            from_email=from_email,
            from_name=from_name,
            admin_email=admin_email,
        )


# =============================================================================
# Email Templates
# =============================================================================


def _display(value: str | None) -> str:
    """Escape a user-supplied value, with a placeholder when empty."""
    return escape(value) if value else "Not provided"


def _build_admin_summary_html(
    referral: ReferralOut,
    referrer: ReferrerOut | None,
) -> str:
    """Build HTML content for the admin summary email."""
    html = """
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333;">New Referral Received</h2>
    """

    if referrer is not None:
        html += f"""
        <div style="background: #f5f5f5; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #666;">Referrer Details</h3>
            <p><strong>Name:</strong> {_display(referrer.name)}</p>
            <p><strong>Email:</strong> {_display(referrer.email)}</p>
            <p><strong>Phone:</strong> {_display(referrer.phone)}</p>
            <p><strong>Total Referrals:</strong> {referrer.referral_count}</p>
        </div>
        """

    html += f"""
        <div style="background: #e8f4fd; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #0066cc;">Referee Details</h3>
            <p><strong>Name:</strong> {_display(referral.name)}</p>
            <p><strong>Email:</strong> {_display(referral.email)}</p>
            <p><strong>Phone:</strong> {_display(referral.phone)}</p>
    """

    if referral.field_of_work:
        html += f"""
            <p><strong>Field of Work:</strong> {escape(referral.field_of_work)}</p>
        """
    if referral.program:
        html += f"""
            <p><strong>Program:</strong> {escape(referral.program)}</p>
        """
    if referral.company:
        html += f"""
            <p><strong>Company:</strong> {escape(referral.company)}</p>
        """
    if referral.message:
        html += f"""
            <p><strong>Message:</strong> {escape(referral.message)}</p>
        """

    html += """
        </div>
        <p style="color: #999; font-size: 12px; margin-top: 30px;">
            This email was automatically generated by the referral service.
        </p>
    </div>
    """

    return html


def _build_referee_welcome_html(
    referral: ReferralOut,
    referrer: ReferrerOut,
) -> str:
    """Build HTML content for the welcome email to the referee."""
    program = _display(referral.program)

    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333;">Welcome to Our Program!</h2>

        <p>Hello {_display(referral.name)},</p>

        <p>You have been referred to our {program} program by {_display(referrer.name)}.</p>

        <p>We're excited to have you join us! Our team will review your details and contact you soon.</p>

        <div style="background: #f5f5f5; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #666;">Program Details</h3>
            <p><strong>Selected Program:</strong> {program}</p>
            <p><strong>Your Field of Work:</strong> {_display(referral.field_of_work)}</p>
        </div>

        <p>If you have any questions, feel free to reach out to us.</p>

        <p>Best regards,<br>The Team</p>
    </div>
    """

    return html


def _build_confirmation_html(referral: ReferralOut) -> str:
    """Build HTML content for the direct-mode confirmation email."""
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333;">Thank You!</h2>

        <p>Hello {_display(referral.name)},</p>

        <p>We received your referral for {_display(referral.company)}. Our team will review it and contact you soon.</p>

        <p>Best regards,<br>The Team</p>
    </div>
    """

    return html


# =============================================================================
# Email Sender
# =============================================================================


class EmailSender:
    """Sends emails via Resend API."""

    def __init__(self, config: EmailConfig | None = None):
        """Initialize the email sender.

        Args:
            config: Email configuration. If not provided, loads from environment.
        """
        self.config = config or EmailConfig.from_env()
        resend.api_key = self.config.api_key

    async def _send(self, to: str, subject: str, html_content: str) -> bool:
        """Send one message. Returns True on success, False otherwise."""
        if not self.config.api_key:
            logger.error("Cannot send email: RESEND_API_KEY not configured")
            return False

        try:
            params: resend.Emails.SendParams = {
                "from": f"{self.config.from_name} <{self.config.from_email}>",
                "to": [to],
                "subject": subject,
                "html": html_content,
            }

            email_response = await asyncio.to_thread(resend.Emails.send, params)
            logger.info(f"Email '{subject}' sent to {to}: {email_response.get('id')}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {e}")
            return False

    async def send_admin_summary(
        self,
        referral: ReferralOut,
        referrer: ReferrerOut | None,
    ) -> bool:
        """Send the submission summary to the administrative address.

        Args:
            referral: The committed referral
            referrer: The committed referrer, or None in direct mode

        Returns:
            True if email sent successfully, False otherwise
        """
        if not self.config.admin_email:
            logger.error("Cannot send admin summary: ADMIN_EMAIL not configured")
            return False

        html_content = _build_admin_summary_html(referral, referrer)
        return await self._send(self.config.admin_email, ADMIN_SUBJECT, html_content)

    async def send_referee_notice(
        self,
        referral: ReferralOut,
        referrer: ReferrerOut | None,
    ) -> bool:
        """Send the referee email.

        With a referrer this is the program welcome naming the referrer;
        without one it is a confirmation to the submitted address.

        Returns:
            True if email sent successfully, False otherwise
        """
        if referrer is None:
            html_content = _build_confirmation_html(referral)
            return await self._send(referral.email, CONFIRMATION_SUBJECT, html_content)

        html_content = _build_referee_welcome_html(referral, referrer)
        return await self._send(referral.email, REFEREE_SUBJECT, html_content)


# =============================================================================
# Convenience Functions
# =============================================================================


async def send_referral_notifications(
    sender: EmailSender,
    referral: ReferralOut,
    referrer: ReferrerOut | None,
) -> NotificationReport:
    """Send both notifications concurrently and report which went out.

    Args:
        sender: The email sender to use
        referral: The committed referral
        referrer: The committed referrer, or None in direct mode

    Returns:
        NotificationReport with one flag per email
    """
    admin_sent, referee_sent = await asyncio.gather(
        sender.send_admin_summary(referral, referrer),
        sender.send_referee_notice(referral, referrer),
    )
    return NotificationReport(
        admin_email_sent=admin_sent,
        referee_email_sent=referee_sent,
    )
