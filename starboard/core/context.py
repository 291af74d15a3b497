"""
Workspace Context - Starboard Evaluation API
starboard/core/context.py

Per-request caller context: who is calling, in which workspace, for which
application, and with which capabilities. Resolved once at the request
boundary and passed explicitly to services.
"""

import json
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Union

from starboard.core.exceptions import ForbiddenException
from starboard.models.enumerations import Permission


class CapabilitySet:
    """Immutable set of granted permissions."""

    __slots__ = ("_granted",)

    def __init__(self, permissions: Iterable[Permission] = ()):
        self._granted: FrozenSet[Permission] = frozenset(permissions)

    @classmethod
    def parse(cls, raw: Union[str, list, None]) -> "CapabilitySet":
        """
        Build a capability set from the stored role permissions.

        Accepts a JSON array string or an already-decoded list. Unknown
        permission strings are dropped.
        """
        if raw is None or raw == "":
            return cls()
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError:
                return cls()
        if not isinstance(raw, list):
            return cls()

        known = {p.value: p for p in Permission}
        return cls(known[item] for item in raw if isinstance(item, str) and item in known)

    def can(self, permission: Permission) -> bool:
        return permission in self._granted

    def __contains__(self, permission: Permission) -> bool:
        return self.can(permission)

    def __iter__(self):
        return iter(sorted(self._granted, key=lambda p: p.value))

    def __len__(self) -> int:
        return len(self._granted)

    def to_json(self) -> str:
        return json.dumps([p.value for p in self])


@dataclass(frozen=True)
class WorkspaceContext:
    """Caller identity scoped to one application's workspace."""

    user_id: str
    workspace_id: str
    application_id: str
    is_member: bool = True
    capabilities: CapabilitySet = field(default_factory=CapabilitySet)

    def can(self, permission: Permission) -> bool:
        return self.is_member and self.capabilities.can(permission)

    def require(self, permission: Permission) -> None:
        """Raise ForbiddenException unless the caller holds `permission`."""
        if not self.is_member:
            raise ForbiddenException("Not a member of this workspace")
        if not self.capabilities.can(permission):
            raise ForbiddenException(
                f"Insufficient permissions. Requires {permission.value} permission."
            )

    def require_member(self) -> None:
        if not self.is_member:
            raise ForbiddenException("Not a member of this workspace")

    def require_self_or(self, owner_user_id: Optional[str], permission: Permission) -> None:
        """Allow the owner of a resource, otherwise require `permission`."""
        if owner_user_id is not None and owner_user_id == self.user_id:
            return
        self.require(permission)
