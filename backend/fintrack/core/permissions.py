from __future__ import annotations
"""
Role based access control.

The whole permission matrix lives in ROLE_PERMISSIONS. Anything not listed
there is denied. Services receive an explicit Actor and ask this module
before mutating anything.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from fintrack.core.errors import PermissionDenied


class Role(str, Enum):
    """Application roles."""
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    DATA_ENTRY = "data_entry"


class Action(str, Enum):
    """Actions gated by role."""
    VIEW = "view"

    TRANSACTION_CREATE = "transaction:create"
    TRANSACTION_EDIT = "transaction:edit"
    TRANSACTION_SUBMIT = "transaction:submit"
    TRANSACTION_APPROVE = "transaction:approve"
    TRANSACTION_REJECT = "transaction:reject"
    TRANSACTION_EDIT_APPROVED = "transaction:edit_approved"
    TRANSACTION_DELETE_ANY = "transaction:delete_any"
    TRANSACTION_DELETE_OWN_DRAFT = "transaction:delete_own_draft"

    INVOICE_CREATE = "invoice:create"
    INVOICE_UPDATE_STATUS = "invoice:update_status"
    CLIENT_CREATE = "client:create"
    CLIENT_UPDATE = "client:update"
    GOAL_CREATE = "goal:create"

    CATEGORY_MANAGE = "category:manage"
    ACCOUNT_MANAGE = "account:manage"
    ACCOUNT_RECONCILE = "account:reconcile"
    USER_MANAGE = "user:manage"
    SETTINGS_ACCESS = "settings:access"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Action]] = {
    Role.ADMIN: frozenset(Action),
    Role.HR: frozenset({
        Action.VIEW,
        Action.TRANSACTION_CREATE,
        Action.TRANSACTION_EDIT,
        Action.TRANSACTION_SUBMIT,
        Action.TRANSACTION_DELETE_OWN_DRAFT,
    }),
    Role.MANAGER: frozenset({
        Action.VIEW,
        Action.TRANSACTION_DELETE_OWN_DRAFT,
        Action.INVOICE_CREATE,
        Action.INVOICE_UPDATE_STATUS,
        Action.CLIENT_CREATE,
        Action.CLIENT_UPDATE,
        Action.GOAL_CREATE,
    }),
    Role.DATA_ENTRY: frozenset({
        Action.VIEW,
        Action.TRANSACTION_CREATE,
        Action.TRANSACTION_EDIT,
        Action.TRANSACTION_DELETE_OWN_DRAFT,
    }),
}


def is_allowed(role: Optional[str], action: Action) -> bool:
    """Return True if `role` may perform `action`. Unknown roles get nothing."""
    try:
        role_enum = Role(role)
    except ValueError:
        return False
    return action in ROLE_PERMISSIONS.get(role_enum, frozenset())


@dataclass(frozen=True)
class Actor:
    """The authenticated user a request acts on behalf of."""
    user_id: int
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can(self, action: Action) -> bool:
        return is_allowed(self.role, action)

    def require(self, action: Action) -> None:
        """Raise PermissionDenied unless the actor's role permits `action`."""
        if not self.can(action):
            raise PermissionDenied(f"Role '{self.role.value}' may not perform {action.value}")
