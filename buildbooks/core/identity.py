from dataclasses import dataclass

from buildbooks.core.exceptions import PermissionDeniedError
from buildbooks.models.user import UserRole


@dataclass(frozen=True)
class ActingUser:
    """The user on whose behalf a ledger operation runs."""

    id: str
    role: UserRole

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.owner


def ensure_owner(acting_user: ActingUser, action: str) -> None:
    """Raise PermissionDeniedError unless the acting user is an owner."""
    if not acting_user.is_owner:
        raise PermissionDeniedError(f"Only owners can {action}")
