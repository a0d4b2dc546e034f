"""
Transactional email via SMTP (Gmail or other): new document requests for admins, status updates for clients.
Set SMTP_USER, SMTP_PASSWORD (and optionally NOTIFY_FROM) in .env. Use a Gmail App Password.
Every sender is best-effort: it returns False instead of raising.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from portal.config import settings

logger = logging.getLogger(__name__)


def _from_address() -> str:
    if (settings.notify_from or "").strip():
        return settings.notify_from.strip()
    user = (settings.smtp_user or "").strip()
    if user:
        return f"Client Portal <{user}>"
    return "Client Portal <noreply@localhost>"


def _send(to_email: str, subject: str, body: str) -> bool:
    to_email = (to_email or "").strip()
    if not to_email:
        return False
    user = (settings.smtp_user or "").strip()
    password = (settings.smtp_password or "").strip()
    if not user or not password:
        logger.debug("SMTP_USER or SMTP_PASSWORD not set; skipping email to %s", to_email)
        return False
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _from_address()
    msg["To"] = to_email
    msg.attach(MIMEText(body, "plain"))
    msg.attach(MIMEText(f"<pre style='font-family:sans-serif'>{body}</pre>", "html"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            server.starttls()
            server.login(user, password)
            server.sendmail(user, [to_email], msg.as_string())
        logger.info("Email sent to %s: %s", to_email, subject)
        return True
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        return False


def send_new_request_email(to_email: str, *, user_name: str | None, title: str, user_id: int | None = None) -> bool:
    """Admin-facing: a client opened a document request."""
    lines = [f"{user_name or 'A client'} requested: {title}", ""]
    if user_id:
        lines.append(f"Profile: {settings.portal_base_url.rstrip('/')}/admin/user/{user_id}")
    return _send(to_email, "New document request", "\n".join(lines))


def send_request_update_email(to_email: str, *, title: str, status: str, admin_message: str | None = None) -> bool:
    """Client-facing: their request changed status (optionally with the admin's answer)."""
    lines = [f'Your request "{title}" is now: {status}']
    if admin_message:
        lines += ["", "Message from our team:", admin_message]
    lines += ["", f"See it in the portal: {settings.portal_base_url.rstrip('/')}/dashboard"]
    return _send(to_email, f"Document request {status}", "\n".join(lines))
