from typing import Optional


def can_administer(identity: Optional[dict]) -> bool:
    """Whether ``identity`` may list users and decide on their verification."""
    if not identity:
        return False
    return bool(identity.get("is_admin", False))
