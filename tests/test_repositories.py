"""
Repository Tests - Starboard Evaluation API
tests/test_repositories.py

Checks the conditional inserts that keep one score per judge and one step
per number. SQLite runs against a real database; the Snowflake statements
are captured with mocks.
"""
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from starboard.core.exceptions import DuplicateEntityException
from starboard.models.enumerations import StepType
from starboard.repositories.base import BaseRepository
from starboard.repositories.score_repository import ScoreRepository
from starboard.repositories.step_repository import StepRepository


STEPS = [
    {"step_number": 1, "name": "Review", "type": StepType.INITIAL_REVIEW, "is_active": True,
     "criteria": [{"name": "Team", "weight": 2}]},
    {"step_number": 2, "name": "Interview", "type": StepType.INTERVIEW, "criteria": [{"name": "Pitch"}]},
]


@pytest.fixture
def snowflake_backend():
    with patch.object(BaseRepository, "is_snowflake", return_value=True):
        yield


def _normalize(sql):
    return " ".join(sql.split())


class TestInsertUnlessExists:
    """Tests for BaseRepository.build_insert_unless_exists()."""

    def test_sqlite_uses_not_exists(self, db_path):
        sql, params = BaseRepository().build_insert_unless_exists(
            "APPLICATION_SCORES",
            {"id": "s1", "submission_id": "sub", "step_id": "step", "judge_id": "j"},
            match_columns=("submission_id", "step_id", "judge_id"),
        )

        assert "WHERE NOT EXISTS" in sql
        assert "SUBMISSION_ID = ? AND STEP_ID = ? AND JUDGE_ID = ?" in _normalize(sql)
        assert params == ["s1", "sub", "step", "j", "sub", "step", "j"]

    def test_snowflake_uses_merge(self, snowflake_backend):
        sql, params = BaseRepository().build_insert_unless_exists(
            "APPLICATION_SCORES",
            {"id": "s1", "submission_id": "sub", "step_id": "step", "judge_id": "j"},
            match_columns=("submission_id", "step_id", "judge_id"),
        )

        flat = _normalize(sql)
        assert flat.startswith("MERGE INTO APPLICATION_SCORES T")
        assert "USING (SELECT ? AS ID, ? AS SUBMISSION_ID, ? AS STEP_ID, ? AS JUDGE_ID) S" in flat
        assert "ON T.SUBMISSION_ID = S.SUBMISSION_ID AND T.STEP_ID = S.STEP_ID AND T.JUDGE_ID = S.JUDGE_ID" in flat
        assert "WHEN NOT MATCHED THEN INSERT (ID, SUBMISSION_ID, STEP_ID, JUDGE_ID)" in flat
        assert "WHERE NOT EXISTS" not in flat
        assert params == ["s1", "sub", "step", "j"]


class TestScoreInsert:
    """Tests for ScoreRepository.create_if_absent()."""

    def test_snowflake_score_is_merged(self, snowflake_backend):
        repo = ScoreRepository()
        with patch.object(repo, "execute_query", return_value=1) as execute, \
                patch.object(repo, "get_by_id", return_value={"id": "created"}):
            result = repo.create_if_absent("sub", "step", "judge", {"c1": 7}, 7.0, notes="ok")

        sql, params = execute.call_args.args
        assert _normalize(sql).startswith("MERGE INTO APPLICATION_SCORES")
        assert "WHEN NOT MATCHED THEN INSERT" in sql
        assert params[1:4] == ["sub", "step", "judge"]
        assert params[4] == '{"c1": 7.0}'
        assert execute.call_args.kwargs == {"commit": True}
        assert result == {"id": "created"}

    def test_snowflake_existing_score_returns_none(self, snowflake_backend):
        repo = ScoreRepository()
        with patch.object(repo, "execute_query", return_value=0), patch.object(repo, "get_by_id") as get_by_id:
            assert repo.create_if_absent("sub", "step", "judge", {"c1": 7}, 7.0) is None
        get_by_id.assert_not_called()

    def test_sqlite_second_score_is_skipped(self, workspace, steps):
        repo = ScoreRepository()
        step_id = steps[1]["id"]
        first = repo.create_if_absent(workspace.submission_ids[0], step_id, workspace.judge_ids[0], {"c": 7}, 7.0)
        second = repo.create_if_absent(workspace.submission_ids[0], step_id, workspace.judge_ids[0], {"c": 9}, 9.0)

        assert first["total_score"] == 7.0
        assert second is None
        assert len(repo.list_by_submission(workspace.submission_ids[0])) == 1


class TestStepInsert:
    """Tests for StepRepository.create_steps()."""

    def test_snowflake_steps_are_merged(self, snowflake_backend):
        repo = StepRepository()
        cursor = MagicMock()
        cursor.rowcount = 1

        @contextmanager
        def fake_transaction():
            yield cursor

        with patch.object(repo, "transaction", fake_transaction), \
                patch.object(repo, "list_by_application", return_value=[]):
            repo.create_steps("app-1", STEPS)

        step_statements = [c.args[0] for c in cursor.execute.call_args_list if "EVALUATION_STEPS" in c.args[0]]
        assert len(step_statements) == 2
        for sql in step_statements:
            flat = _normalize(sql)
            assert flat.startswith("MERGE INTO EVALUATION_STEPS T")
            assert "ON T.APPLICATION_ID = S.APPLICATION_ID AND T.STEP_NUMBER = S.STEP_NUMBER" in flat

    def test_snowflake_existing_step_rejected(self, snowflake_backend):
        repo = StepRepository()
        cursor = MagicMock()
        cursor.rowcount = 0

        @contextmanager
        def fake_transaction():
            yield cursor

        with patch.object(repo, "transaction", fake_transaction):
            with pytest.raises(DuplicateEntityException):
                repo.create_steps("app-1", STEPS)

    def test_sqlite_setup_twice_rejected(self, workspace):
        repo = StepRepository()
        repo.create_steps(workspace.application_id, STEPS)

        with pytest.raises(DuplicateEntityException):
            repo.create_steps(workspace.application_id, STEPS)
        assert [s["step_number"] for s in repo.list_by_application(workspace.application_id)] == [1, 2]
