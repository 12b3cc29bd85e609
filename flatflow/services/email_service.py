import logging
from html import escape
from typing import Optional

import httpx

from flatflow.config import settings

logger = logging.getLogger(__name__)


class EmailDispatchError(Exception):
    """The invitation email could not be sent. ``str(exc)`` is safe to show users."""


def build_invite_url(token: str, site_url: Optional[str] = None) -> str:
    return f"{(site_url or settings.SITE_URL).rstrip('/')}/invite?token={token}"


class InvitationMailer:
    """Sends household invitation emails through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.resend.com/emails",
        sender: str = "FlatFlow <onboarding@resend.dev>",
        site_url: str = "http://localhost:5173",
        timeout: float = 10,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.sender = sender
        self.site_url = site_url
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "InvitationMailer":
        return cls(
            api_key=settings.RESEND_API_KEY,
            api_url=settings.RESEND_API_URL,
            sender=settings.EMAIL_FROM,
            site_url=settings.SITE_URL,
            timeout=settings.EMAIL_TIMEOUT,
        )

    def send_invitation(
        self,
        email: str,
        household_id: int,
        household_name: str,
        inviter_name: str,
        token: str,
    ) -> dict:
        """
        Send the invitation email.

        Returns:
            The provider's JSON response

        Raises:
            EmailDispatchError: if the service is not configured or the send failed
        """
        if not self.api_key:
            logger.error("RESEND_API_KEY not configured")
            raise EmailDispatchError(
                "Email service not configured. The invitation was created but no email was sent."
            )

        invite_url = build_invite_url(token, self.site_url)
        payload = {
            "from": self.sender,
            "to": [email],
            "subject": f"You're invited to join {household_name} on FlatFlow!",
            "html": self._render_html(household_name, inviter_name, invite_url),
            "tags": [{"name": "household_id", "value": str(household_id)}],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "Invitation email send failed",
                    extra={"status": exc.response.status_code, "response": exc.response.text},
                )
                raise EmailDispatchError(self._describe_failure(exc.response)) from exc
            except httpx.RequestError as exc:
                logger.exception("Invitation email request failed")
                raise EmailDispatchError("Could not reach the email service.") from exc

        logger.info("Invitation email sent to %s for household %s", email, household_id)
        return response.json()

    @staticmethod
    def _describe_failure(response: httpx.Response) -> str:
        text = response.text.lower()
        if response.status_code in (401, 403) and "domain" not in text:
            return "Invalid email API key. Please check the email service configuration."
        if "domain" in text:
            return "Email domain not verified. Please verify the sending domain."
        return f"Failed to send invitation email (status {response.status_code})."

    @staticmethod
    def _render_html(household_name: str, inviter_name: str, invite_url: str) -> str:
        household_name = escape(household_name)
        inviter_name = escape(inviter_name)
        invite_url = escape(invite_url, quote=True)
        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
          <h1 style="color: #333; text-align: center;">You're Invited!</h1>
          <p style="font-size: 16px; color: #666;">
            {inviter_name} has invited you to join the <strong>{household_name}</strong> household on FlatFlow.
          </p>
          <p style="font-size: 16px; color: #666;">
            FlatFlow helps you manage chores, shopping lists, and expenses with your flatmates.
          </p>
          <div style="text-align: center; margin: 30px 0;">
            <a href="{invite_url}"
               style="background-color: #3b82f6; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px;">
              Accept Invitation
            </a>
          </div>
          <p style="font-size: 14px; color: #999; text-align: center;">
            If the button doesn't work, copy and paste this link into your browser:<br>
            <a href="{invite_url}" style="color: #3b82f6;">{invite_url}</a>
          </p>
          <p style="font-size: 12px; color: #999; text-align: center; margin-top: 30px;">
            This invitation will expire in {settings.INVITATION_EXPIRE_DAYS} days.
          </p>
        </div>
        """
