"""
Role-based scoping of the notification feed.

The filter is turned into a SQL predicate so scoping happens in the query,
never in the client.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import false, true

from app.core.config import settings
from app.models.staff import StaffRole
from app.models.visitor import Visitor

FULL_VISIBILITY_ROLES = {StaffRole.RECEPTION.value, StaffRole.ADMIN.value}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Identity:
    """Caller identity as described by the poll request hints."""
    role: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_hints(cls, role: Optional[str] = None, user_name: Optional[str] = None) -> "Identity":
        role = _clean(role)
        return cls(role=role.lower() if role else None, name=_clean(user_name))

    @property
    def is_staff(self) -> bool:
        return self.role == StaffRole.STAFF.value

    @property
    def is_anonymous(self) -> bool:
        return self.role is None or (self.role not in FULL_VISIBILITY_ROLES and not self.is_staff)


class VisibilityFilter:
    """Decides which notification events an identity may observe."""

    def __init__(self, strict: Optional[bool] = None):
        self.strict = settings.notification_strict_visibility if strict is None else strict

    def predicate(self, identity: Identity):
        """
        SQL expression over the visitor joined to each event.

        Staff only see events for visitors they host; a staff caller without a
        name sees nothing. Reception, admin and unidentified callers see
        everything, unless strict mode denies unidentified callers.
        """
        if identity.is_staff:
            if not identity.name:
                return false()
            return Visitor.host_name == identity.name
        if identity.is_anonymous and self.strict:
            return false()
        return true()
