"""
Email Service using Resend

Sends clearance outcome notifications to students.
"""

import asyncio
import logging
from html import escape

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key

_BASE_STYLE = """
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #1a365d; margin-bottom: 24px; }}
            .button {{ display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }}
            .reason-box {{ background-color: #fef2f2; border: 1px solid #fecaca; padding: 16px; border-radius: 8px; margin: 16px 0; }}
            .reason-box p {{ margin: 0; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
"""


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Resend's client is synchronous
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_clearance_completed(to_email: str, student_name: str) -> bool:
    """Tell the student every office has approved and the certificate is ready."""
    safe_student_name = escape(student_name)
    certificate_url = f"{settings.frontend_url}/student/status"

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>{_BASE_STYLE.format()}</style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Your Clearance Is Complete</h1>

            <p>Hello {safe_student_name},</p>

            <p>All offices have approved your clearance application. You can now download your clearance certificate.</p>

            <a href="{certificate_url}" class="button">Download Certificate</a>

            <div class="footer">
                <p>Registrar Office</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject="Your clearance application has been completed",
        html_content=html_content,
    )


async def send_clearance_rejected(
    to_email: str,
    student_name: str,
    office: str,
    reason: str | None,
) -> bool:
    """Tell the student which office rejected the application and why."""
    safe_student_name = escape(student_name)
    safe_office = escape(office)
    safe_reason = escape(reason) if reason else "No reason was given."

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>{_BASE_STYLE.format()}</style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Update on Your Clearance Application</h1>

            <p>Hello {safe_student_name},</p>

            <p>Your clearance application was rejected by the <strong>{safe_office}</strong> office.</p>

            <div class="reason-box">
                <p><strong>Reason:</strong></p>
                <p>{safe_reason}</p>
            </div>

            <p>Please contact the office to resolve the issue, then submit a new application.</p>

            <div class="footer">
                <p>Registrar Office</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject="Update on your clearance application",
        html_content=html_content,
    )
