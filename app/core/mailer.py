import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from app.core.config import settings

logger = logging.getLogger(__name__)

SUBJECTS = {
    "verification": "TeamNest - Email Verification",
    "reset": "TeamNest - Password Reset",
}


def _otp_html(code: str, purpose: str) -> str:
    title = "Email Verification" if purpose == "verification" else "Password Reset"
    label = "verification" if purpose == "verification" else "reset"
    return f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6;">
            <h2 style="color: #2563eb;">TeamNest</h2>
            <h3>{title}</h3>
            <p>Your {label} code is:</p>
            <h1 style="color: #2563eb; font-size: 32px; letter-spacing: 3px; text-align: center;">
                {code}
            </h1>
            <p>This code will expire in <b>{settings.OTP_EXPIRE_MIN} minutes</b>.</p>
            <p>If you didn't request this, please ignore this email.</p>
        </body>
    </html>
    """


def send_otp_email(to_email: str, code: str, purpose: str = "verification") -> bool:
    """Send a one-time code by email. Returns False instead of raising."""
    if not settings.SENDGRID_API_KEY:
        logger.warning("SENDGRID_API_KEY not set, %s email to %s not sent", purpose, to_email)
        return False

    message = Mail(
        from_email=settings.SENDGRID_FROM_EMAIL,
        to_emails=to_email,
        subject=SUBJECTS.get(purpose, SUBJECTS["verification"]),
        html_content=_otp_html(code, purpose),
    )

    try:
        response = SendGridAPIClient(settings.SENDGRID_API_KEY).send(message)
    except Exception:
        logger.exception("Failed to send %s email to %s", purpose, to_email)
        return False

    logger.info("%s email sent to %s, status: %s", purpose.capitalize(), to_email, response.status_code)
    return True
