"""
Member Repository - Starboard Evaluation API
starboard/repositories/member_repository.py

Data access layer for workspace roles and memberships. Role permissions are
stored as a JSON array and decoded here, and only here, into a CapabilitySet.
"""

from typing import Any, Dict, Iterable, Optional
from uuid import uuid4

from starboard.core.context import CapabilitySet
from starboard.models.enumerations import Permission
from starboard.repositories.base import BaseRepository


class MemberRepository(BaseRepository):
    """Repository for roles and workspace members."""

    def create_role(
        self,
        workspace_id: str,
        name: str,
        permissions: Iterable[Permission],
    ) -> Dict[str, Any]:
        """Create a role granting `permissions` inside a workspace."""
        role_id = str(uuid4())
        capabilities = CapabilitySet(permissions)

        sql = """
            INSERT INTO ROLES (ID, WORKSPACE_ID, NAME, PERMISSIONS, CREATED_AT)
            VALUES (?, ?, ?, ?, ?)
        """
        self.execute_query(
            sql,
            (role_id, workspace_id, name, capabilities.to_json(), self.format_timestamp(self.now_utc())),
            commit=True,
        )

        return {
            "id": role_id,
            "workspace_id": workspace_id,
            "name": name,
            "capabilities": capabilities,
        }

    def add_member(self, workspace_id: str, user_id: str, role_id: str) -> None:
        """Add a user to a workspace with the given role."""
        sql = """
            INSERT INTO WORKSPACE_MEMBERS (WORKSPACE_ID, USER_ID, ROLE_ID, CREATED_AT)
            VALUES (?, ?, ?, ?)
        """
        self.execute_query(
            sql,
            (workspace_id, user_id, role_id, self.format_timestamp(self.now_utc())),
            commit=True,
        )

    def get_member(self, workspace_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a membership with its decoded capabilities.

        Returns:
            Member dict or None if the user is not in the workspace
        """
        sql = """
            SELECT M.WORKSPACE_ID, M.USER_ID, M.ROLE_ID, R.NAME AS ROLE_NAME, R.PERMISSIONS
            FROM WORKSPACE_MEMBERS M
            JOIN ROLES R ON R.ID = M.ROLE_ID
            WHERE M.WORKSPACE_ID = ? AND M.USER_ID = ?
        """
        row = self.execute_query(sql, (workspace_id, user_id), fetch_one=True)

        if not row:
            return None

        return {
            "workspace_id": row["WORKSPACE_ID"],
            "user_id": row["USER_ID"],
            "role_id": row["ROLE_ID"],
            "role_name": row["ROLE_NAME"],
            "capabilities": CapabilitySet.parse(row["PERMISSIONS"]),
        }

    def count_with_permission(self, workspace_id: str, permission: Permission) -> int:
        """Number of workspace members whose role grants `permission`."""
        sql = """
            SELECT R.PERMISSIONS, COUNT(*) AS MEMBER_COUNT
            FROM WORKSPACE_MEMBERS M
            JOIN ROLES R ON R.ID = M.ROLE_ID
            WHERE M.WORKSPACE_ID = ?
            GROUP BY R.ID, R.PERMISSIONS
        """
        rows = self.execute_query(sql, (workspace_id,), fetch_all=True) or []

        return sum(
            int(row["MEMBER_COUNT"])
            for row in rows
            if CapabilitySet.parse(row["PERMISSIONS"]).can(permission)
        )
