"""
Email Service.

Renders Jinja2 templates from ``docuvault/templates/email`` and delivers them
over SMTP. Sending never raises: every outcome is reported as an
:class:`EmailResult`, because email is a side channel of the operation that
triggered it.
"""

from __future__ import annotations

import asyncio
import html as html_lib
import re
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from docuvault.core.logging_config import get_logger
from docuvault.server.core import constant
from docuvault.server.core.config import SMTPConfig, settings

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates" / "email"

_TAG_RE = re.compile(r"<[^>]+>")
_STYLE_RE = re.compile(r"<(style|script)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def html_to_text(html: str) -> str:
    """Plain-text alternative of an HTML body."""
    text = _STYLE_RE.sub("", html)
    text = re.sub(r"<br\s*/?>|</p>|</h\d>|</li>|</tr>", "\n", text, flags=re.IGNORECASE)
    text = html_lib.unescape(_TAG_RE.sub("", text))
    lines = (line.strip() for line in text.splitlines())
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailService:
    """SMTP sender with Jinja2 templating."""

    def __init__(self, config: SMTPConfig, templates_dir: Path = TEMPLATES_DIR) -> None:
        self.config = config
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(self, template_name: str, variables: Dict[str, Any]) -> Optional[str]:
        """Render ``{template_name}.html``; None when the template does not exist."""
        context = {
            "app_name": constant.PROJECT_NAME,
            "frontend_url": settings.frontend_url,
            "support_email": settings.support_email,
            **variables,
        }
        try:
            return self.env.get_template(f"{template_name}.html").render(**context)
        except TemplateNotFound:
            logger.warning(f"Email template not found: {template_name}")
            return None

    async def send_email(
        self,
        to: str,
        subject: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
        template_name: Optional[str] = None,
        template_vars: Optional[Dict[str, Any]] = None,
    ) -> EmailResult:
        """
        Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body, used when no template is given or it is missing
            text: Plain-text body; derived from the HTML when omitted
            template_name: Template to render instead of ``html``
            template_vars: Variables for the template

        Returns:
            EmailResult describing the outcome
        """
        if not self.config.is_configured:
            logger.warning(f"SMTP is not configured; email '{subject}' to {to} was not sent")
            return EmailResult(success=False, error="Missing SMTP configuration")

        if template_name:
            html = self.render(template_name, template_vars or {}) or html
        if not html and not text:
            return EmailResult(success=False, error="Email has no content")

        message = EmailMessage()
        message["From"] = self.config.sender or self.config.user
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=(self.config.host or "localhost"))
        message.set_content(text or html_to_text(html or ""))
        if html:
            message.add_alternative(html, subtype="html")

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {e}")
            return EmailResult(success=False, error=str(e))

        logger.info(f"Email sent to {to}: {subject}")
        return EmailResult(success=True, message_id=message["Message-ID"])

    def _deliver(self, message: EmailMessage) -> None:
        if self.config.secure:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=30)
        else:
            server = smtplib.SMTP(self.config.host, self.config.port, timeout=30)
        with server:
            if not self.config.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            server.login(self.config.user, self.config.password)
            server.send_message(message)

    # ------------------------------------------------------------------
    # Typed senders
    # ------------------------------------------------------------------

    async def send_user_invite(
        self, to: str, first_name: str, tenant_name: str, temporary_password: Optional[str] = None
    ) -> EmailResult:
        return await self.send_email(
            to,
            f"You've been invited to join {tenant_name} on {constant.PROJECT_NAME}",
            template_name="user_invite",
            template_vars={
                "first_name": first_name,
                "tenant_name": tenant_name,
                "email": to,
                "temporary_password": temporary_password,
                "login_url": f"{settings.frontend_url}/login",
            },
        )

    async def send_tenant_registration(self, to: str, tenant: Dict[str, Any]) -> EmailResult:
        return await self.send_email(
            to,
            "New Tenant Registration - Approval Required",
            template_name="tenant_registration",
            template_vars={"tenant": tenant, "review_url": f"{settings.frontend_url}/admin/tenants"},
        )

    async def send_tenant_approved(self, to: str, tenant_name: str, first_name: Optional[str]) -> EmailResult:
        return await self.send_email(
            to,
            f"Your {constant.PROJECT_NAME} Account Has Been Approved!",
            template_name="tenant_approved",
            template_vars={
                "tenant_name": tenant_name,
                "first_name": first_name or "there",
                "login_url": f"{settings.frontend_url}/login",
            },
        )

    async def send_tenant_rejected(
        self, to: str, tenant_name: str, first_name: Optional[str], reason: str
    ) -> EmailResult:
        return await self.send_email(
            to,
            f"Your {constant.PROJECT_NAME} Registration Was Not Approved",
            template_name="tenant_rejected",
            template_vars={"tenant_name": tenant_name, "first_name": first_name or "there", "reason": reason},
        )

    async def send_tenant_name_changed(self, to: str, tenant_id: str, old_name: str, new_name: str) -> EmailResult:
        return await self.send_email(
            to,
            "Tenant Organization Name Changed",
            template_name="tenant_name_changed",
            template_vars={"tenant_id": tenant_id, "old_name": old_name, "new_name": new_name},
        )

    async def send_tenant_ui_updated(self, to: str, tenant_name: str, page: str) -> EmailResult:
        return await self.send_email(
            to,
            f"Tenant {page} Updated",
            template_name="tenant_ui_updated",
            template_vars={"tenant_name": tenant_name, "page": page},
        )

    async def send_tenant_plan_updated(
        self, to: str, tenant_name: str, old_plan: Optional[str], new_plan: str
    ) -> EmailResult:
        return await self.send_email(
            to,
            "Tenant Billing Plan Updated",
            template_name="tenant_plan_updated",
            template_vars={"tenant_name": tenant_name, "old_plan": old_plan or "None", "new_plan": new_plan},
        )

    async def send_tenant_billing_expired(self, to: str, tenant_name: str, expired_at: str) -> EmailResult:
        return await self.send_email(
            to,
            "⚠️ URGENT: Tenant Billing Expired",
            template_name="tenant_billing_expired",
            template_vars={"tenant_name": tenant_name, "expired_at": expired_at},
        )

    async def send_folder_created(self, to: str, details: Dict[str, Any]) -> EmailResult:
        return await self.send_email(
            to, "New Folder Created in Your Organization", template_name="folder_created", template_vars=details
        )

    async def send_folder_deleted(self, to: str, details: Dict[str, Any]) -> EmailResult:
        return await self.send_email(
            to, "⚠️ Folder Deleted from Your Organization", template_name="folder_deleted", template_vars=details
        )

    async def send_document_uploaded(self, to: str, details: Dict[str, Any]) -> EmailResult:
        return await self.send_email(
            to,
            "New Document Uploaded to Your Organization",
            template_name="document_uploaded",
            template_vars=details,
        )

    async def send_document_deleted(self, to: str, details: Dict[str, Any]) -> EmailResult:
        return await self.send_email(
            to,
            "⚠️ Document Deleted from Your Organization",
            template_name="document_deleted",
            template_vars=details,
        )


@lru_cache
def get_email_service() -> EmailService:
    """Process-wide email service built from settings."""
    return EmailService(settings.smtp)
