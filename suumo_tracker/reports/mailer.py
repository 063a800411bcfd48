"""
Metrics E-mail Module.

Formats today's DailyMetrics as a plain text report and sends it over
SMTP with the rendered chart images attached.
"""

import smtplib
import ssl
from collections.abc import Iterable
from datetime import date
from email.message import EmailMessage
from pathlib import Path

from loguru import logger

from config.settings import SmtpSettings
from suumo_tracker.aggregation import ALL_CATEGORY
from suumo_tracker.errors import ConfigError
from suumo_tracker.modules.metrics import DailyMetrics

mail_log = logger.bind(module="Mailer")


def format_number(number: int | float | None) -> str:
    """
    Format an integer with comma thousands separators.

    Examples:
        >>> format_number(1234567)
        '1,234,567'
        >>> format_number(None)
        '0'
    """
    return f"{int(number or 0):,}"


def build_report_body(metrics: DailyMetrics, categories: dict[str, str]) -> str:
    """
    Build the plain text report.

    Args:
        metrics: DailyMetrics record
        categories: Category table (name -> location substring)

    Returns:
        One line per category: "- <label>: <avg> (<count> items)"
    """
    lines = [f"Metrics (Average price/size) for {metrics.date}:"]

    labels = {ALL_CATEGORY: ALL_CATEGORY, **categories}
    for name, label in labels.items():
        avg = metrics.avgs.get(name)
        count = metrics.counts.get(name, 0)
        lines.append(f"- {label}: {format_number(avg)} ({format_number(count)} items)")

    return "\n".join(lines) + "\n"


def existing_files(paths: Iterable[str | Path]) -> list[Path]:
    """Filter attachment candidates down to files that exist."""
    return [Path(p) for p in paths if Path(p).is_file()]


def build_message(
    sender: str,
    to: str,
    body: str,
    attachments: Iterable[str | Path] = (),
    today: date | None = None,
) -> EmailMessage:
    """
    Assemble the report e-mail.

    Args:
        sender: From address
        to: Recipient address
        body: Plain text body
        attachments: PNG files to attach (missing files are skipped)
        today: Date used in the subject

    Returns:
        EmailMessage ready to send
    """
    today = today or date.today()

    msg = EmailMessage()
    msg["Subject"] = f"Real State Metrics {today.strftime('%Y-%m-%d')}"
    msg["From"] = sender
    msg["To"] = to
    msg.set_content(body)

    for path in existing_files(attachments):
        msg.add_attachment(
            path.read_bytes(),
            maintype="image",
            subtype="png",
            filename=path.name,
        )

    return msg


def check_smtp_settings(settings: SmtpSettings) -> None:
    """
    Validate required SMTP settings.

    Raises:
        ConfigError: If host, recipient or sender is missing
    """
    missing = [
        name
        for name, value in (
            ("SMTP_HOST", settings.host),
            ("SMTP_TO", settings.to),
            ("SMTP_SENDER/SMTP_USER", settings.from_address),
        )
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing mail settings: {', '.join(missing)}")


def send_report(settings: SmtpSettings, msg: EmailMessage) -> None:
    """
    Send the report over SMTP.

    Args:
        settings: SMTP settings
        msg: Message built by build_message
    """
    check_smtp_settings(settings)

    with smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout) as server:
        if settings.use_tls:
            server.starttls(context=ssl.create_default_context())
        if settings.user:
            server.login(settings.user, settings.password)
        server.send_message(msg)

    mail_log.info(f"Email sent to {settings.to}")
