import logging

from nirapod_auth.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from nirapod_auth.core.permissions import can_administer
from nirapod_auth.repositories.user_repo import UserRepository
from nirapod_auth.services.mailer import SmtpMailNotifier

logger = logging.getLogger(__name__)

VERIFICATION_FILTERS = ("all", "true", "false")


class AdminService:
    def __init__(self, user_repo: UserRepository, mailer: SmtpMailNotifier):
        self.user_repo = user_repo
        self.mailer = mailer

    async def list_users(self, requester: dict, verified: str = "all") -> list[dict]:
        if not can_administer(requester):
            raise ForbiddenError("Forbidden: Admins only")
        if verified not in VERIFICATION_FILTERS:
            raise ValidationError("verified must be one of: all, true, false")

        users = await self.user_repo.list_all()
        if verified == "true":
            return [u for u in users if u["is_verified"]]
        if verified == "false":
            return [u for u in users if not u["is_verified"]]
        return users

    async def set_verification(self, requester: dict, user_id: str, approve: bool) -> dict:
        if not can_administer(requester):
            raise ForbiddenError("Forbidden: Admins only")

        result = await self.user_repo.update_verification(user_id, approve)
        if result is None:
            raise NotFoundError("User not found")
        was_verified, user = result
        logger.info(
            "Admin %s set verification of %s: %s -> %s",
            requester["id"], user_id, was_verified, approve,
        )

        # notify on real transitions only, the state change stands either way
        try:
            if approve and not was_verified:
                await self.mailer.send_verification_approved(user["email"], user["name"])
            elif not approve and was_verified:
                await self.mailer.send_verification_disapproved(user["email"], user["name"])
        except Exception:
            logger.exception(f"Verification notice for user {user_id} not delivered")
        return user
