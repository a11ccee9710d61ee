import logging
import smtplib
from email.mime.text import MIMEText

from starlette.concurrency import run_in_threadpool

from nirapod_auth.core.config import settings
from nirapod_auth.core.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class SmtpMailNotifier:
    """Sends account e-mails over SMTP.

    smtplib blocks, so every send runs in the threadpool with a socket
    timeout. Any transport failure is raised as DeliveryError; whether that
    aborts the request is up to the caller.
    """

    def __init__(
            self,
            host: str = settings.MAIL_HOST,
            port: int = settings.MAIL_PORT,
            user: str = settings.MAIL_USER,
            password: str = settings.MAIL_PASS,
            sender: str = settings.MAIL_FROM,
            timeout: float = settings.MAIL_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout = timeout

    async def send_otp(self, email: str, code: str) -> None:
        body = (
            f"Your password reset code is: {code}\n\n"
            f"It is valid for {settings.OTP_EXPIRE_MINUTES} minutes. "
            "If you did not request a reset, ignore this e-mail."
        )
        await self._send(email, "Password reset code", body)

    async def send_verification_approved(self, email: str, name: str) -> None:
        body = (
            f"Hello {name},\n\n"
            "Your identity documents have been reviewed and your account is now verified."
        )
        await self._send(email, "Your account has been verified", body)

    async def send_verification_disapproved(self, email: str, name: str) -> None:
        body = (
            f"Hello {name},\n\n"
            "Your account verification has been withdrawn by an administrator. "
            "Please contact support if you think this is a mistake."
        )
        await self._send(email, "Your account verification was revoked", body)

    async def _send(self, to: str, subject: str, body: str) -> None:
        if not self.host:
            logger.warning("MAIL_HOST is not configured, dropping mail %r to %s", subject, to)
            return
        await run_in_threadpool(self._deliver, to, subject, body)

    def _deliver(self, to: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
                s.starttls()
                if self.user:
                    s.login(self.user, self.password)
                s.sendmail(self.sender, [to], msg.as_string())
        except Exception as e:
            raise DeliveryError(f"Could not deliver e-mail to {to}: {e}") from e
        logger.info("Sent mail %r to %s", subject, to)
