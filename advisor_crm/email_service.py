"""
Email Service using SMTP (primary) or Resend (fallback)
Provides appointment and quotation emails from MJML templates
"""

import logging
import smtplib
import ssl
from datetime import date, datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASS,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USER,
)
from .email_templates import (
    appointment_assigned_template,
    appointment_changed_template,
    appointment_confirmation_client_template,
    cdn_quotation_template,
)

logger = logging.getLogger(__name__)

# Initialize Resend as fallback
resend.api_key = RESEND_API_KEY


class EmailNotConfigured(Exception):
    """Neither SMTP credentials nor a Resend key are available"""


def smtp_configured() -> bool:
    return bool(SMTP_USER and SMTP_PASS)


def email_configured() -> bool:
    return smtp_configured() or bool(RESEND_API_KEY)


def send_via_smtp(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
) -> dict:
    """Send email via the configured SMTP server"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(html_content, "html"))

    try:
        if SMTP_PORT == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
            if SMTP_USE_TLS:
                context = ssl.create_default_context()
                server.starttls(context=context)

        server.login(SMTP_USER, SMTP_PASS)
        server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
        server.quit()
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ SMTP send failed via {SMTP_HOST}: {e}")
        raise

    logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
    return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    errors = getattr(result, "errors", None)
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    html = getattr(result, "html", None)
    if html is None and isinstance(result, dict):
        html = result.get("html", "")
    return html if html is not None else str(result)


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using SMTP (if configured) or Resend (fallback)

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        EmailNotConfigured: when no transport is available
    """
    if not email_configured():
        raise EmailNotConfigured("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if smtp_configured():
        try:
            logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
            return send_via_smtp(recipients, subject, html_content, sender)
        except (smtplib.SMTPException, OSError) as e:
            if not RESEND_API_KEY:
                raise
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    logger.info(f"📧 Sending email via Resend to: {recipients}")
    response = resend.Emails.send(
        {
            "from": sender,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
    )
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


def format_appointment_date(value: Union[date, datetime, str]) -> str:
    """Render a date as e.g. 'March 4, 2026'"""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.strftime('%B')} {value.day}, {value.year}"


# ============================================
# Pre-built emails for appointment and quotation events
# ============================================


async def send_appointment_confirmation(
    client_name: str,
    client_email: Optional[str],
    appointment_title: str,
    appointment_date: str,
    appointment_time: str,
    team_member_name: str,
    team_member_email: str,
    description: Optional[str] = None,
) -> list[dict]:
    """Confirm a new appointment to the client and the assigned team member"""
    if not email_configured():
        logger.info("Email configuration not found, skipping appointment confirmation")
        return []

    responses = []
    if client_email:
        responses.append(
            await send_email(
                to=client_email,
                subject=f"Appointment Confirmation - {appointment_title}",
                mjml_content=appointment_confirmation_client_template(
                    client_name,
                    appointment_title,
                    appointment_date,
                    appointment_time,
                    team_member_name,
                    description,
                ),
            )
        )
    responses.append(
        await send_email(
            to=team_member_email,
            subject=f"New Appointment Assigned - {appointment_title}",
            mjml_content=appointment_assigned_template(
                team_member_name,
                client_name,
                client_email,
                appointment_title,
                appointment_date,
                appointment_time,
                description,
            ),
        )
    )
    logger.info("✅ Appointment confirmation emails sent successfully")
    return responses


async def send_appointment_update(
    client_name: str,
    client_email: Optional[str],
    appointment_title: str,
    appointment_date: str,
    appointment_time: str,
    team_member_name: str,
    team_member_email: str,
    is_update: bool,
    description: Optional[str] = None,
) -> list[dict]:
    """Tell client and team member that an appointment changed or was cancelled"""
    if not email_configured():
        logger.info("Email configuration not found, skipping appointment update")
        return []

    action = "Updated" if is_update else "Cancelled"
    recipients = [(client_name, client_email), (team_member_name, team_member_email)]
    responses = []
    for name, address in recipients:
        if not address:
            continue
        responses.append(
            await send_email(
                to=address,
                subject=f"Appointment {action} - {appointment_title}",
                mjml_content=appointment_changed_template(
                    name,
                    appointment_title,
                    appointment_date,
                    appointment_time,
                    is_update,
                    description,
                ),
            )
        )
    logger.info(f"✅ Appointment {action.lower()} emails sent successfully")
    return responses


async def send_cdn_quotation_email(
    client_name: str,
    client_email: str,
    amount: int,
    rate: str,
    term: int,
    maturity: int,
) -> Optional[dict]:
    """Send a capital deposit note quotation to the client"""
    if not email_configured():
        logger.info("Email configuration not found, skipping quotation email")
        return None

    return await send_email(
        to=client_email,
        subject="Capital Deposit Note Quotation",
        mjml_content=cdn_quotation_template(client_name, amount, rate, term, maturity),
    )
