"""
MJML Email Templates
Appointment and quotation emails, compiled to HTML by email_service
"""

from html import escape
from typing import Optional

from .config import EMAIL_FROM_NAME, FRONTEND_URL

# Matches the "light" palette in themes.py
THEME = {
    "primary": "#0073EA",
    "secondary": "#00C875",
    "background": "#F8FAFC",
    "card_bg": "#FFFFFF",
    "text_primary": "#1E293B",
    "text_secondary": "#334155",
    "text_muted": "#64748B",
    "border": "#E2E8F0",
    "danger": "#EF4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}" width="600px">
        <mj-section background-color="{THEME['card_bg']}" padding="32px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {EMAIL_FROM_NAME}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _details_block(rows: list[tuple[str, Optional[str]]]) -> str:
    lines = "".join(
        f"<strong>{label}:</strong> {escape(str(value))}<br/>" for label, value in rows if value
    )
    return f"""
    <mj-text background-color="{THEME['background']}" padding="20px" color="{THEME['text_primary']}">
      {lines}
    </mj-text>
    """


def appointment_confirmation_client_template(
    client_name: str,
    appointment_title: str,
    appointment_date: str,
    appointment_time: str,
    team_member_name: str,
    description: Optional[str] = None,
) -> str:
    """Appointment confirmed, sent to the client"""
    details = _details_block(
        [
            ("Title", appointment_title),
            ("Date", appointment_date),
            ("Time", appointment_time),
            ("Assigned to", team_member_name),
            ("Description", description),
        ]
    )
    content = f"""
    <mj-text>
      Dear {escape(client_name)},
    </mj-text>

    <mj-text>
      Your appointment has been successfully scheduled with our team.
    </mj-text>

    {details}

    <mj-text>
      If you need to reschedule or have any questions, please contact us.
    </mj-text>
    """

    return get_base_template(
        title="Appointment Confirmed",
        preview_text=f"Appointment Confirmation - {appointment_title}",
        content_sections=content,
    )



def appointment_assigned_template(
    team_member_name: str,
    client_name: str,
    client_email: Optional[str],
    appointment_title: str,
    appointment_date: str,
    appointment_time: str,
    description: Optional[str] = None,
) -> str:
    """New appointment assignment, sent to the team member"""
    details = _details_block(
        [
            ("Title", appointment_title),
            ("Date", appointment_date),
            ("Time", appointment_time),
            ("Client", client_name),
            ("Client Email", client_email),
            ("Description", description),
        ]
    )
    content = f"""
    <mj-text>
      Hello {escape(team_member_name)},
    </mj-text>

    <mj-text>
      You have been assigned a new appointment.
    </mj-text>

    {details}

    <mj-text>
      Please ensure you're prepared for this appointment.
    </mj-text>
    """

    return get_base_template(
        title="New Appointment Assignment",
        preview_text=f"New Appointment Assigned - {appointment_title}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/appointments",
        cta_label="View Appointments",
    )


def appointment_changed_template(
    recipient_name: str,
    appointment_title: str,
    appointment_date: str,
    appointment_time: str,
    is_update: bool,
    description: Optional[str] = None,
) -> str:
    """Appointment updated (is_update=True) or cancelled"""
    if is_update:
        title = "Appointment Updated"
        lead = "The details of your appointment have changed. The current details are below."
    else:
        title = "Appointment Cancelled"
        lead = "The following appointment has been cancelled."

    details = _details_block(
        [
            ("Title", appointment_title),
            ("Date", appointment_date),
            ("Time", appointment_time),
            ("Description", description),
        ]
    )
    content = f"""
    <mj-text>
      Dear {escape(recipient_name)},
    </mj-text>

    <mj-text>
      {lead}
    </mj-text>

    {details}
    """

    return get_base_template(
        title=title,
        preview_text=f"{title} - {appointment_title}",
        content_sections=content,
    )


def cdn_quotation_template(
    client_name: str,
    amount: int,
    rate: str,
    term: int,
    maturity: int,
) -> str:
    """Capital deposit note quotation summary"""
    term_label = f"{term} Year" if term == 1 else f"{term} Years"
    details = _details_block(
        [
            ("Investment Amount", f"R {amount:,}"),
            ("Interest Rate", f"{rate}%"),
            ("Term", term_label),
            ("Maturity Value", f"R {maturity:,}"),
        ]
    )
    content = f"""
    <mj-text>
      Dear {escape(client_name)},
    </mj-text>

    <mj-text>
      Thank you for your interest. Please find your Capital Deposit Note quotation below.
    </mj-text>

    {details}

    <mj-text font-size="13px" color="{THEME['text_muted']}">
      This quotation is an illustration and is subject to final approval.
    </mj-text>
    """

    return get_base_template(
        title="Capital Deposit Note Quotation",
        preview_text="Your Capital Deposit Note quotation",
        content_sections=content,
    )
