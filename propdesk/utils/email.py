from flask import current_app
from flask_mail import Message


def send_email(to_email: str, subject: str, body: str) -> bool:
    """
    Send email using Flask-Mail configuration.
    Falls back to logging the message if mail is not configured or sending fails.
    """
    mail = current_app.extensions.get("mail")
    if mail is None:
        current_app.logger.warning("Mail not configured; to=%s subject=%r body=%r", to_email, subject, body[:120])
        return False

    msg = Message(
        subject=subject,
        recipients=[to_email],
        body=body,
        sender=current_app.config.get("MAIL_DEFAULT_SENDER"),
    )
    try:
        mail.send(msg)
    except OSError as e:
        current_app.logger.warning("Failed to send mail to %s: %s", to_email, e)
        return False

    current_app.logger.info("Mail sent to %s: %s", to_email, subject)
    return True


def invite_email_body(name: str, signup_url: str, ttl_days: int) -> str:
    return f"""Hello {name},

You've been invited to set up your tenant account.

Please click the link below to complete your registration:
{signup_url}

This invitation will expire in {ttl_days} days.
"""
