from typing import Optional
from asyncpg import Connection, UniqueViolationError

from nirapod_auth.core.exceptions import UserAlreadyExistsException

USER_COLUMNS = (
    "id", "name", "email", "phone", "hashed_password", "nid_front", "nid_back",
    "photo", "is_verified", "is_admin", "created_at",
)
PROFILE_COLUMNS = ("name", "email", "phone")


def _duplicate_field(e: UniqueViolationError) -> str:
    return "phone" if "phone" in (e.constraint_name or "") else "email"


class UserRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    # ------------------ Retrieval Methods ------------------ #

    async def get_by_id(self, user_id: str) -> Optional[dict]:
        sql = "SELECT * FROM users WHERE id = $1;"
        record = await self.conn.fetchrow(sql, user_id)
        return dict(record) if record else None

    async def get_by_email(self, email: str) -> Optional[dict]:
        sql = "SELECT * FROM users WHERE email = $1;"
        record = await self.conn.fetchrow(sql, email)
        return dict(record) if record else None

    async def get_by_phone(self, phone: str) -> Optional[dict]:
        sql = "SELECT * FROM users WHERE phone = $1;"
        record = await self.conn.fetchrow(sql, phone)
        return dict(record) if record else None

    async def list_all(self) -> list[dict]:
        sql = "SELECT * FROM users ORDER BY created_at, id;"
        records = await self.conn.fetch(sql)
        return [dict(record) for record in records]

    # ------------------ Creation ------------------ #

    async def create(self, user: dict) -> dict:
        sql = f"""
            INSERT INTO users ({", ".join(USER_COLUMNS)})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
            RETURNING *;
        """
        try:
            record = await self.conn.fetchrow(sql, *(user[column] for column in USER_COLUMNS))
        except UniqueViolationError as e:
            raise UserAlreadyExistsException(_duplicate_field(e))
        return dict(record)

    # ------------------ Targeted Updates ------------------ #
    # each writes only its own columns, so a stale copy of the user
    # cannot overwrite a concurrent verification decision

    async def update_password(self, user_id: str, hashed_password: str) -> None:
        sql = "UPDATE users SET hashed_password = $1 WHERE id = $2;"
        await self.conn.execute(sql, hashed_password, user_id)

    async def update_profile(self, user_id: str, changes: dict) -> Optional[dict]:
        columns = [column for column in PROFILE_COLUMNS if column in changes]
        if not columns:
            return await self.get_by_id(user_id)
        assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(columns, start=2))
        sql = f"UPDATE users SET {assignments} WHERE id = $1 RETURNING *;"
        try:
            record = await self.conn.fetchrow(sql, user_id, *(changes[column] for column in columns))
        except UniqueViolationError as e:
            raise UserAlreadyExistsException(_duplicate_field(e))
        return dict(record) if record else None

    async def promote_to_admin(self, user_id: str) -> Optional[dict]:
        sql = "UPDATE users SET is_admin = TRUE, is_verified = TRUE WHERE id = $1 RETURNING *;"
        record = await self.conn.fetchrow(sql, user_id)
        return dict(record) if record else None

    async def update_verification(self, user_id: str, approve: bool) -> Optional[tuple[bool, dict]]:
        """Set ``is_verified`` and return ``(previous value, updated user)``.

        The row is locked for the read and the write so concurrent decisions
        on the same user are serialized.
        """
        async with self.conn.transaction():
            current = await self.conn.fetchrow(
                "SELECT is_verified FROM users WHERE id = $1 FOR UPDATE;", user_id
            )
            if current is None:
                return None
            record = await self.conn.fetchrow(
                "UPDATE users SET is_verified = $1 WHERE id = $2 RETURNING *;", approve, user_id
            )
            return current["is_verified"], dict(record)
