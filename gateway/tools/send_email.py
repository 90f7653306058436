"""Email sending tool over the user's SMTP server."""

import asyncio
import json
import smtplib
from email.message import EmailMessage

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from gateway.core.exceptions import ToolExecutionError
from gateway.tools.context import ToolContext, get_tool_context

SMTPS_PORT = 465


def _deliver(context: ToolContext, message: EmailMessage) -> None:
    host = context.require_key("smtp_host", "SMTP host")
    user = context.require_key("smtp_user", "SMTP user")
    password = context.require_key("smtp_pass", "SMTP password")
    port = int(context.api_keys.get("smtp_port") or 587)
    timeout = context.timeout.read or 30.0

    smtp_class = smtplib.SMTP_SSL if port == SMTPS_PORT else smtplib.SMTP
    with smtp_class(host, port, timeout=timeout) as server:
        if port != SMTPS_PORT:
            server.starttls()
        server.login(user, password)
        server.send_message(message)


@tool
async def send_email(
    to: str, subject: str, body: str, config: RunnableConfig, html: bool = False
) -> str:
    """Send an email from the user's configured SMTP account."""
    context = get_tool_context(config)
    if "@" not in to:
        raise ToolExecutionError(f"Invalid recipient address: {to}")

    sender = context.api_keys.get("smtp_from") or context.api_keys.get("smtp_user", "")
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body, subtype="html" if html else "plain")

    try:
        await asyncio.to_thread(_deliver, context, message)
    except (smtplib.SMTPException, OSError) as e:
        raise ToolExecutionError(f"SMTP error: {e}") from e

    return json.dumps({"success": True, "to": to, "subject": subject})
