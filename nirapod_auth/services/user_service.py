from nirapod_auth.core.exceptions import NotFoundError, UserAlreadyExistsException, ValidationError
from nirapod_auth.repositories.user_repo import UserRepository
from nirapod_auth.schemas.user_schema import UserUpdate


class UserService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def update_own_profile(self, user: dict, patch: UserUpdate) -> dict:
        """Apply the non-empty fields of ``patch`` to ``user``.

        A new email or phone that already belongs to another account is rejected.
        Only the profile columns are written; the verification flag is left to admins.
        """
        changes = {
            field: value.strip()
            for field, value in patch.model_dump(include={"name", "email", "phone"}).items()
            if value and value.strip()
        }
        if "@" not in changes.get("email", "@"):
            raise ValidationError("Invalid email address")
        lookups = {"email": self.user_repo.get_by_email, "phone": self.user_repo.get_by_phone}
        for field, lookup in lookups.items():
            if field not in changes or changes[field] == user[field]:
                continue
            owner = await lookup(changes[field])
            if owner and owner["id"] != user["id"]:
                raise UserAlreadyExistsException(field)

        if not changes:
            return user
        updated = await self.user_repo.update_profile(user["id"], changes)
        if updated is None:
            raise NotFoundError("User not found")
        return updated
