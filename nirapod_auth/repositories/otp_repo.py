from datetime import datetime
from typing import Optional
from asyncpg import Connection


class OtpRepository:
    """Repository for the one-active-code-per-email OTP table."""

    def __init__(self, conn: Connection):
        self.conn = conn

    async def upsert(self, email: str, code: str, expires_at: datetime) -> None:
        sql = """
            INSERT INTO otp_codes (email, code, expires_at)
            VALUES ($1, $2, $3)
            ON CONFLICT (email) DO UPDATE SET code = EXCLUDED.code, expires_at = EXCLUDED.expires_at;
        """
        await self.conn.execute(sql, email, code, expires_at)

    async def get(self, email: str) -> Optional[dict]:
        sql = "SELECT * FROM otp_codes WHERE email = $1;"
        record = await self.conn.fetchrow(sql, email)
        return dict(record) if record else None

    async def consume(self, email: str, code: str, now: datetime) -> bool:
        """Delete the code if it matches and has not expired; True if it was deleted."""
        sql = """
            DELETE FROM otp_codes
            WHERE email = $1 AND code = $2 AND expires_at >= $3
            RETURNING email;
        """
        return await self.conn.fetchval(sql, email, code, now) is not None
