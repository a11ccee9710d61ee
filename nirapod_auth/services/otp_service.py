# nirapod_auth/services/otp_service.py

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from nirapod_auth.core.config import settings
from nirapod_auth.repositories.otp_repo import OtpRepository


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpManager:
    """Issues, checks and consumes one-time codes, one active code per email."""

    def __init__(
            self,
            otp_repo: OtpRepository,
            ttl: Optional[timedelta] = None,
            length: Optional[int] = None,
            clock: Callable[[], datetime] = utcnow,
    ):
        self.otp_repo = otp_repo
        self.ttl = ttl or timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        self.length = length or settings.OTP_LENGTH
        self.clock = clock

    def generate_code(self) -> str:
        return "".join(secrets.choice(string.digits) for _ in range(self.length))

    async def issue(self, email: str) -> str:
        code = self.generate_code()
        await self.otp_repo.upsert(email, code, self.clock() + self.ttl)
        return code

    async def is_valid(self, email: str, code: str) -> bool:
        if not code:
            return False
        record = await self.otp_repo.get(email)
        if record is None:
            return False
        if not secrets.compare_digest(record["code"].encode("utf-8"), code.encode("utf-8")):
            return False
        return self.clock() <= record["expires_at"]

    async def redeem(self, email: str, code: str) -> bool:
        """Check and delete the code in one step, so it can be used only once."""
        if not code:
            return False
        return await self.otp_repo.consume(email, code, self.clock())
