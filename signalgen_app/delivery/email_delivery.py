"""E-mail signal notification with a local archive."""

import html
import json
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Any

from ..config.defaults import EmailParams
from ..data.models import GeneratedSignal
from ..errors import DeliveryError
from ..utils.time import format_local_time, utc_now
from .base import NotifySink


class EmailSignalNotifier(NotifySink):
    """
    Renders each signal as an HTML e-mail.

    Every message is archived (HTML body plus JSON metadata) under the
    configured archive directory. When SMTP credentials are configured the
    message is also sent; an SMTP failure after a successful archive is
    logged but still counts as a delivered notification.
    """

    def __init__(self, config: EmailParams, name: str = "email"):
        super().__init__(name)
        self.config = config
        self.archive_dir = Path(config.archive_dir)

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.config.smtp_password and self.config.recipients)

    @property
    def sender(self) -> str:
        return f"{self.config.sender_name} <{self.config.smtp_user}>"

    def notify(self, signal: GeneratedSignal) -> bool:
        subject = f"Deriv Signal: {signal.strategy_type} - {signal.instrument_name}"
        body = self.render_html(signal)

        try:
            html_path = self._archive(signal, subject, body)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(
                "Failed to archive signal e-mail",
                signal_id=signal.id,
                archive_dir=str(self.archive_dir),
                error=str(e)
            )
            self._record(False)
            return False

        self.logger.info("Signal e-mail archived", signal_id=signal.id, path=str(html_path))

        if self.smtp_enabled:
            try:
                self._send(signal, subject, body)
                self.logger.info(
                    "Signal e-mail sent via SMTP",
                    signal_id=signal.id,
                    recipients=len(self.config.recipients)
                )
            except DeliveryError as e:
                self.logger.warning(
                    "SMTP delivery failed, archive copy kept",
                    signal_id=signal.id,
                    smtp_host=self.config.smtp_host,
                    error=str(e)
                )

        self._record(True)
        return True

    def render_html(self, signal: GeneratedSignal) -> str:
        """HTML body of the notification e-mail."""
        local_time = format_local_time(signal.created_at, self.config.display_timezone)
        rows = [
            ("Time (EAT)", local_time),
            ("Volatility Index", signal.instrument_name),
            ("Strategy Type", signal.strategy_type),
            ("Strategy", signal.strategy_name),
            ("Entry Point", signal.entry_point),
            ("Predicted Signal", signal.predicted_signal),
            ("Win Probability", signal.win_probability),
        ]
        details = "\n".join(
            f"      <p><strong>{label}:</strong> {html.escape(str(value))}</p>"
            for label, value in rows
        )

        return (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">\n'
            '  <h2>Deriv Trading Signal</h2>\n'
            '  <div>\n'
            f'{details}\n'
            '  </div>\n'
            '  <div>\n'
            '    <h3>Signal Reason:</h3>\n'
            f'    <p>{html.escape(signal.reason)}</p>\n'
            '  </div>\n'
            '  <p style="font-size: 12px;">This is an automated signal. Please trade responsibly.</p>\n'
            '</div>\n'
        )

    def list_archived(self) -> list[dict[str, Any]]:
        """Metadata of archived e-mails, unreadable files skipped."""
        if not self.archive_dir.exists():
            return []

        results = []
        for path in sorted(self.archive_dir.glob("signal_*.json")):
            try:
                metadata = json.loads(path.read_text())
            except (OSError, ValueError) as e:
                self.logger.warning("Skipping unreadable e-mail metadata", path=str(path), error=str(e))
                continue
            results.append({"path": str(path), "metadata": metadata})

        return results

    def verify(self) -> bool:
        """Check archive write access and, if configured, SMTP reachability."""
        try:
            self.archive_dir.mkdir(parents=True, exist_ok=True)
            marker = self.archive_dir / ".write_test"
            marker.write_text("ok")
            marker.unlink()
        except OSError as e:
            self.logger.error("E-mail archive not writable", archive_dir=str(self.archive_dir), error=str(e))
            return False

        if self.smtp_enabled:
            try:
                with self._connect() as smtp:
                    smtp.noop()
            except (smtplib.SMTPException, OSError) as e:
                self.logger.warning(
                    "SMTP verification failed, using local archive only",
                    smtp_host=self.config.smtp_host,
                    error=str(e)
                )
        else:
            self.logger.info("No SMTP configuration found, using local archive only")

        return True

    def health_check(self) -> bool:
        return self.verify()

    def _archive(self, signal: GeneratedSignal, subject: str, body: str) -> Path:
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        stamp = utc_now().strftime("%Y-%m-%dT%H-%M-%S-%f")
        base = self.archive_dir / f"signal_{signal.id}_{stamp}"

        metadata = {
            "id": signal.id,
            "timestamp": utc_now().isoformat(),
            "from": self.sender,
            "to": list(self.config.recipients),
            "subject": subject,
            "signal": signal.to_dict(),
        }

        html_path = base.with_suffix(".html")
        html_path.write_text(body)
        base.with_suffix(".json").write_text(json.dumps(metadata, indent=2))
        return html_path

    def _connect(self) -> smtplib.SMTP:
        timeout = self.config.timeout_seconds
        if self.config.smtp_port == 465:
            smtp = smtplib.SMTP_SSL(self.config.smtp_host, self.config.smtp_port, timeout=timeout)
        else:
            smtp = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=timeout)

        try:
            if self.config.smtp_port != 465:
                smtp.starttls()
            smtp.login(self.config.smtp_user, self.config.smtp_password)
        except (smtplib.SMTPException, OSError):
            smtp.close()
            raise
        return smtp

    def _send(self, signal: GeneratedSignal, subject: str, body: str) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = ", ".join(self.config.recipients)
        message.set_content("This signal e-mail requires an HTML-capable client.")
        message.add_alternative(body, subtype="html")

        try:
            with self._connect() as smtp:
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(
                f"SMTP send failed: {e}",
                delivery_method="smtp",
                signal_id=signal.id,
                context={"smtp_host": self.config.smtp_host}
            ) from e
