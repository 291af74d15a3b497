# tests/conftest.py

"""
Pytest Fixtures - Shared test configuration and seeded workspaces

Every test that touches the database gets its own SQLite file under
pytest's tmp_path; Redis caching is disabled unless a test mocks it.

SEEDED WORKSPACE (make_workspace):
- Roles:    Admin (all permissions), Judge (score + view scores), Viewer
- Members:  one admin, N judges, one viewer
- Outsider: a user with no membership
- One application (scores 1-10, 75% coverage, cutoffs 0)
- M submissions at step 1, each owned by its own applicant user
"""

from dataclasses import dataclass, field
from typing import Dict, List
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from starboard.config import get_settings
from starboard.core.context import CapabilitySet, WorkspaceContext
from starboard.core.dependencies import get_notifier
from starboard.models.enumerations import Permission, StepType
from starboard.repositories.application_repository import ApplicationRepository
from starboard.repositories.member_repository import MemberRepository
from starboard.repositories.step_repository import StepRepository
from starboard.repositories.submission_repository import SubmissionRepository
from starboard.services.cache import reset_cache
from starboard.services.database import init_schema
from starboard.services.notifications import Notifier


JUDGE_PERMISSIONS = [
    Permission.WORKSPACE_VIEW,
    Permission.APPLICATIONS_VIEW,
    Permission.EVALUATION_SCORE,
    Permission.EVALUATION_VIEW_SCORES,
]
VIEWER_PERMISSIONS = [Permission.WORKSPACE_VIEW, Permission.APPLICATIONS_VIEW]


# =============================================================================
# DATABASE + SETTINGS FIXTURES
# =============================================================================

@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Fresh SQLite database with the full schema."""
    path = tmp_path / "starboard-test.db"
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("DB_BACKEND", "sqlite")
    monkeypatch.setenv("SQLITE_PATH", str(path))
    monkeypatch.setenv("CACHE_ENABLED", "false")
    get_settings.cache_clear()
    reset_cache()

    init_schema()
    yield path

    get_settings.cache_clear()
    reset_cache()


# =============================================================================
# NOTIFIER FIXTURE
# =============================================================================

class RecordingNotifier(Notifier):
    """Keeps notifications in memory instead of queueing them."""

    def __init__(self):
        self.events: List[Dict] = []

    def submissions_advanced(self, application, submissions, step_name):
        for submission in submissions:
            self.events.append({"kind": "advanced", "submission_id": submission["id"], "step_name": step_name})

    def submissions_admitted(self, application, submissions):
        for submission in submissions:
            self.events.append({"kind": "admitted", "submission_id": submission["id"]})

    def slot_booked(self, application, submission, slot):
        self.events.append({"kind": "booked", "submission_id": submission["id"], "slot_id": slot["id"]})

    def of_kind(self, kind: str) -> List[Dict]:
        return [e for e in self.events if e["kind"] == kind]


@pytest.fixture
def notifier():
    return RecordingNotifier()


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def client(db_path, notifier):
    """TestClient bound to the per-test database."""
    from starboard.main import create_app

    app = create_app()
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# SEEDED WORKSPACE FIXTURES
# =============================================================================

@dataclass
class Workspace:
    workspace_id: str
    application_id: str
    admin_id: str
    viewer_id: str
    outsider_id: str
    judge_ids: List[str] = field(default_factory=list)
    submission_ids: List[str] = field(default_factory=list)
    applicant_ids: List[str] = field(default_factory=list)

    @property
    def base_url(self) -> str:
        return f"/api/v1/applications/{self.application_id}/evaluation"

    def context(self, user_id: str, permissions=()) -> WorkspaceContext:
        """Context as a service-level caller would receive it."""
        return WorkspaceContext(
            user_id=user_id,
            workspace_id=self.workspace_id,
            application_id=self.application_id,
            capabilities=CapabilitySet(permissions),
        )

    def admin_context(self) -> WorkspaceContext:
        return self.context(self.admin_id, list(Permission))

    def judge_context(self, index: int = 0) -> WorkspaceContext:
        return self.context(self.judge_ids[index], JUDGE_PERMISSIONS)

    def applicant_context(self, index: int = 0) -> WorkspaceContext:
        return WorkspaceContext(
            user_id=self.applicant_ids[index],
            workspace_id=self.workspace_id,
            application_id=self.application_id,
            is_member=False,
        )


def headers(user_id: str) -> Dict[str, str]:
    return {"X-User-Id": user_id}


@pytest.fixture
def make_workspace(db_path):
    """Factory seeding a workspace with `judges` judges and `submissions` submissions."""

    def _make(judges: int = 2, submissions: int = 3) -> Workspace:
        members = MemberRepository()
        workspace_id = str(uuid4())

        admin_role = members.create_role(workspace_id, "Admin", list(Permission))
        judge_role = members.create_role(workspace_id, "Judge", JUDGE_PERMISSIONS)
        viewer_role = members.create_role(workspace_id, "Viewer", VIEWER_PERMISSIONS)

        ws = Workspace(
            workspace_id=workspace_id,
            application_id="",
            admin_id=str(uuid4()),
            viewer_id=str(uuid4()),
            outsider_id=str(uuid4()),
        )
        members.add_member(workspace_id, ws.admin_id, admin_role["id"])
        members.add_member(workspace_id, ws.viewer_id, viewer_role["id"])
        for _ in range(judges):
            judge_id = str(uuid4())
            members.add_member(workspace_id, judge_id, judge_role["id"])
            ws.judge_ids.append(judge_id)

        application = ApplicationRepository().create(workspace_id, "Spring Cohort")
        ws.application_id = application["id"]

        submission_repo = SubmissionRepository()
        for i in range(submissions):
            applicant_id = str(uuid4())
            submission = submission_repo.create(
                application_id=application["id"],
                first_name="Founder",
                last_name=str(i + 1),
                email=f"founder{i + 1}@example.com",
                company_name=f"Startup {i + 1}",
                applicant_user_id=applicant_id,
            )
            ws.submission_ids.append(submission["id"])
            ws.applicant_ids.append(applicant_id)

        return ws

    return _make


@pytest.fixture
def workspace(make_workspace):
    """Default workspace: 2 judges, 3 submissions, no steps yet."""
    return make_workspace()


@pytest.fixture
def step_payload():
    return {
        "step1": {
            "name": "Initial Review",
            "criteria": [
                {"name": "Innovation", "weight": 1.0},
                {"name": "Execution", "weight": 1.0},
            ],
        },
        "step2": {
            "name": "Interview Round",
            "criteria": [{"name": "Communication"}],
        },
    }


@pytest.fixture
def steps(workspace):
    """Create both steps directly and return them keyed by step number."""
    created = StepRepository().create_steps(
        workspace.application_id,
        [
            {"step_number": 1, "name": "Initial Review", "type": StepType.INITIAL_REVIEW, "is_active": True,
             "criteria": [{"name": "Innovation", "weight": 1.0}, {"name": "Execution", "weight": 1.0}]},
            {"step_number": 2, "name": "Interview Round", "type": StepType.INTERVIEW, "is_active": False,
             "criteria": [{"name": "Communication", "weight": 1.0}]},
        ],
    )
    return {step["step_number"]: step for step in created}


def criteria_scores(step: Dict, *values: float) -> Dict[str, float]:
    """Map the step's criteria, in order, to `values`."""
    return {criterion["id"]: value for criterion, value in zip(step["criteria"], values)}
