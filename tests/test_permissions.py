# tests/test_permissions.py

"""
Workspace Context Tests - capability parsing and permission checks
"""

import pytest

from starboard.core.context import CapabilitySet, WorkspaceContext
from starboard.core.exceptions import ForbiddenException
from starboard.models.enumerations import Permission
from starboard.repositories.member_repository import MemberRepository


class TestCapabilitySet:
    def test_parse_json_string(self):
        caps = CapabilitySet.parse('["evaluation.score", "evaluation.view_scores"]')
        assert caps.can(Permission.EVALUATION_SCORE)
        assert Permission.EVALUATION_VIEW_SCORES in caps
        assert not caps.can(Permission.EVALUATION_MANAGE)

    def test_parse_list(self):
        caps = CapabilitySet.parse(["evaluation.admit"])
        assert list(caps) == [Permission.EVALUATION_ADMIT]

    @pytest.mark.parametrize("raw", [None, "", "not json", '{"a": 1}', "42", [1, 2, None]])
    def test_parse_garbage_is_empty(self, raw):
        assert len(CapabilitySet.parse(raw)) == 0

    def test_unknown_permissions_dropped(self):
        caps = CapabilitySet.parse(["evaluation.score", "events.manage"])
        assert len(caps) == 1

    def test_to_json_is_sorted(self):
        caps = CapabilitySet([Permission.EVALUATION_SCORE, Permission.APPLICATIONS_VIEW])
        assert caps.to_json() == '["applications.view", "evaluation.score"]'


class TestWorkspaceContext:
    def _ctx(self, *permissions, is_member=True):
        return WorkspaceContext(
            user_id="user-1",
            workspace_id="ws-1",
            application_id="app-1",
            is_member=is_member,
            capabilities=CapabilitySet(permissions),
        )

    def test_require_granted(self):
        self._ctx(Permission.EVALUATION_MANAGE).require(Permission.EVALUATION_MANAGE)

    def test_require_missing_permission(self):
        with pytest.raises(ForbiddenException) as exc:
            self._ctx(Permission.EVALUATION_SCORE).require(Permission.EVALUATION_ADVANCE)
        assert exc.value.message == "Insufficient permissions. Requires evaluation.advance permission."

    def test_require_non_member(self):
        with pytest.raises(ForbiddenException) as exc:
            self._ctx(Permission.EVALUATION_MANAGE, is_member=False).require(Permission.EVALUATION_MANAGE)
        assert exc.value.message == "Not a member of this workspace"

    def test_non_member_cannot_use_capabilities(self):
        assert not self._ctx(Permission.EVALUATION_MANAGE, is_member=False).can(Permission.EVALUATION_MANAGE)

    def test_require_self_or_owner_passes(self):
        self._ctx(is_member=False).require_self_or("user-1", Permission.EVALUATION_MANAGE)

    def test_require_self_or_other_owner(self):
        with pytest.raises(ForbiddenException):
            self._ctx(Permission.EVALUATION_SCORE).require_self_or("user-2", Permission.EVALUATION_MANAGE)

    def test_require_self_or_no_owner(self):
        with pytest.raises(ForbiddenException):
            self._ctx(is_member=False).require_self_or(None, Permission.EVALUATION_MANAGE)


class TestMemberRepository:
    def test_member_capabilities_round_trip(self, workspace):
        member = MemberRepository().get_member(workspace.workspace_id, workspace.judge_ids[0])
        assert member["role_name"] == "Judge"
        assert member["capabilities"].can(Permission.EVALUATION_SCORE)
        assert not member["capabilities"].can(Permission.EVALUATION_MANAGE)

    def test_unknown_member(self, workspace):
        assert MemberRepository().get_member(workspace.workspace_id, workspace.outsider_id) is None

    def test_count_eligible_judges(self, make_workspace):
        ws = make_workspace(judges=3, submissions=0)
        # 3 judges + the admin hold evaluation.score; the viewer does not
        assert MemberRepository().count_with_permission(ws.workspace_id, Permission.EVALUATION_SCORE) == 4
