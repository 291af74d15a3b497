# tests/test_interview_slots.py

"""
Interview Slot Tests - generation, listing, booking and concurrent claims
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from fastapi import status

from conftest import criteria_scores, headers
from starboard.core.exceptions import AlreadyBookedException, AlreadyScoredException
from starboard.models.evaluation import StepSetupRequest
from starboard.services.evaluation_service import EvaluationService
from starboard.services.interview_service import InterviewService


SLOTS = [
    {"date": "2026-03-03", "startTime": "10:00", "endTime": "10:30", "meetingLink": "https://meet.example.com/b"},
    {"date": "2026-03-02", "startTime": "14:00", "endTime": "14:30"},
    {"date": "2026-03-02", "startTime": "09:00", "endTime": "09:30"},
]


@pytest.fixture
def interviews(notifier):
    return InterviewService(EvaluationService(notifier=notifier))


@pytest.fixture
def slot_ids(workspace, steps, interviews):
    created = interviews.generate_interview_slots(workspace.admin_context(), steps[2]["id"], SLOTS)
    return [slot.id for slot in created.slots]


def _slots_url(ws, step):
    return f"{ws.base_url}/steps/{step['id']}/slots"


def _book(client, ws, slot_id, submission_id, user_id):
    return client.post(
        f"{ws.base_url}/slots/{slot_id}/book",
        json={"submissionId": submission_id},
        headers=headers(user_id),
    )


# =============================================================================
# SLOT GENERATION
# =============================================================================

class TestCreateSlots:
    def test_create_slots(self, client, workspace, steps):
        response = client.post(_slots_url(workspace, steps[2]), json={"slots": SLOTS}, headers=headers(workspace.admin_id))

        assert response.status_code == status.HTTP_201_CREATED
        slots = response.json()["data"]["slots"]
        assert len(slots) == 3
        assert slots[0]["date"] == "2026-03-03"
        assert slots[0]["meetingLink"] == "https://meet.example.com/b"
        assert all(s["isBooked"] is False for s in slots)

    def test_slot_count_on_step(self, client, workspace, steps, slot_ids):
        listed = client.get(f"{workspace.base_url}/steps", headers=headers(workspace.admin_id)).json()["data"]["steps"]
        assert listed[1]["slotCount"] == 3

    def test_slots_only_on_interview_step(self, client, workspace, steps):
        response = client.post(_slots_url(workspace, steps[1]), json={"slots": SLOTS}, headers=headers(workspace.admin_id))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "Interview slots can only be attached to an interview step"

    def test_end_before_start_rejected(self, client, workspace, steps):
        response = client.post(
            _slots_url(workspace, steps[2]),
            json={"slots": [{"date": "2026-03-02", "startTime": "11:00", "endTime": "10:00"}]},
            headers=headers(workspace.admin_id),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "Slot start time must be before end time"

    def test_invalid_date_rejected(self, client, workspace, steps):
        response = client.post(
            _slots_url(workspace, steps[2]),
            json={"slots": [{"date": "next tuesday", "startTime": "10:00", "endTime": "11:00"}]},
            headers=headers(workspace.admin_id),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "Slot date must be a valid date format (YYYY-MM-DD)"

    def test_missing_fields_rejected(self, client, workspace, steps):
        response = client.post(
            _slots_url(workspace, steps[2]),
            json={"slots": [{"date": "2026-03-02"}]},
            headers=headers(workspace.admin_id),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "Each slot must have date, startTime, and endTime"

    def test_empty_slot_list_rejected(self, client, workspace, steps):
        response = client.post(_slots_url(workspace, steps[2]), json={"slots": []}, headers=headers(workspace.admin_id))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "At least one slot is required"

    def test_judge_cannot_create_slots(self, client, workspace, steps):
        response = client.post(
            _slots_url(workspace, steps[2]), json={"slots": SLOTS}, headers=headers(workspace.judge_ids[0])
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# SLOT LISTING
# =============================================================================

class TestListSlots:
    def test_ordered_by_date_and_time(self, client, workspace, steps, slot_ids):
        response = client.get(_slots_url(workspace, steps[2]), headers=headers(workspace.admin_id))
        slots = response.json()["data"]["slots"]
        assert [(s["date"], s["startTime"]) for s in slots] == [
            ("2026-03-02", "09:00"),
            ("2026-03-02", "14:00"),
            ("2026-03-03", "10:00"),
        ]

    def test_available_only(self, client, workspace, steps, slot_ids, interviews):
        interviews.book_interview_slot(workspace.applicant_context(0), slot_ids[0], workspace.submission_ids[0])

        everything = client.get(_slots_url(workspace, steps[2]), headers=headers(workspace.admin_id))
        available = client.get(
            _slots_url(workspace, steps[2]), params={"availableOnly": "true"}, headers=headers(workspace.admin_id)
        )

        assert len(everything.json()["data"]["slots"]) == 3
        assert slot_ids[0] not in [s["id"] for s in available.json()["data"]["slots"]]
        assert len(available.json()["data"]["slots"]) == 2

    def test_applicant_sees_only_free_slots(self, client, workspace, steps, slot_ids, interviews):
        interviews.book_interview_slot(workspace.applicant_context(0), slot_ids[0], workspace.submission_ids[0])

        response = client.get(_slots_url(workspace, steps[2]), headers=headers(workspace.applicant_ids[1]))

        assert response.status_code == status.HTTP_200_OK
        assert all(s["isBooked"] is False for s in response.json()["data"]["slots"])

    def test_stranger_cannot_list(self, client, workspace, steps, slot_ids):
        response = client.get(_slots_url(workspace, steps[2]), headers=headers(workspace.outsider_id))
        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# BOOKING
# =============================================================================

class TestBookSlot:
    def test_applicant_books_slot(self, client, workspace, steps, slot_ids, notifier):
        response = _book(client, workspace, slot_ids[0], workspace.submission_ids[0], workspace.applicant_ids[0])

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["isBooked"] is True
        assert data["submissionId"] == workspace.submission_ids[0]
        assert data["bookedAt"] is not None
        assert notifier.of_kind("booked") == [
            {"kind": "booked", "submission_id": workspace.submission_ids[0], "slot_id": slot_ids[0]}
        ]

    def test_booked_slot_in_submission_status(self, client, workspace, steps, slot_ids):
        _book(client, workspace, slot_ids[1], workspace.submission_ids[0], workspace.applicant_ids[0])
        body = client.get(
            f"{workspace.base_url}/submissions/{workspace.submission_ids[0]}/status",
            headers=headers(workspace.applicant_ids[0]),
        ).json()["data"]
        assert body["interviewSlot"]["id"] == slot_ids[1]

    def test_slot_already_taken(self, client, workspace, steps, slot_ids, notifier):
        _book(client, workspace, slot_ids[0], workspace.submission_ids[0], workspace.applicant_ids[0])
        response = _book(client, workspace, slot_ids[0], workspace.submission_ids[1], workspace.applicant_ids[1])

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["code"] == "ALREADY_BOOKED"
        assert response.json()["error"]["message"] == "This slot is already booked"
        assert len(notifier.of_kind("booked")) == 1

    def test_submission_holds_one_slot(self, client, workspace, steps, slot_ids):
        _book(client, workspace, slot_ids[0], workspace.submission_ids[0], workspace.applicant_ids[0])
        response = _book(client, workspace, slot_ids[1], workspace.submission_ids[0], workspace.applicant_ids[0])

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["message"] == "Submission already has a booked slot"

    def test_rebooking_same_slot_conflicts(self, client, workspace, steps, slot_ids):
        _book(client, workspace, slot_ids[0], workspace.submission_ids[0], workspace.applicant_ids[0])
        response = _book(client, workspace, slot_ids[0], workspace.submission_ids[0], workspace.applicant_ids[0])
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_cannot_book_for_someone_else(self, client, workspace, steps, slot_ids):
        response = _book(client, workspace, slot_ids[0], workspace.submission_ids[1], workspace.applicant_ids[0])
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_manager_books_on_behalf(self, client, workspace, steps, slot_ids):
        response = _book(client, workspace, slot_ids[2], workspace.submission_ids[2], workspace.admin_id)
        assert response.status_code == status.HTTP_200_OK

    def test_unknown_slot(self, client, workspace, steps, slot_ids):
        response = _book(client, workspace, "missing", workspace.submission_ids[0], workspace.applicant_ids[0])
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_slot_of_other_application(self, client, make_workspace, workspace, steps, slot_ids):
        other = make_workspace()
        response = _book(client, other, slot_ids[0], other.submission_ids[0], other.applicant_ids[0])
        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# CONCURRENCY
# =============================================================================

class TestConcurrentWrites:
    def test_one_winner_per_slot(self, make_workspace, notifier):
        ws = make_workspace(judges=1, submissions=8)
        evaluation = EvaluationService(notifier=notifier)
        interviews = InterviewService(evaluation)

        setup = evaluation.create_steps(
            ws.admin_context(),
            StepSetupRequest(
                step1={"name": "Review", "criteria": [{"name": "Team"}]},
                step2={"name": "Interview", "criteria": [{"name": "Pitch"}]},
            ),
        )
        slot = interviews.generate_interview_slots(
            ws.admin_context(),
            setup.steps[1].id,
            [{"date": date(2026, 3, 2).isoformat(), "startTime": "09:00", "endTime": "09:30"}],
        ).slots[0]

        def attempt(index):
            try:
                interviews.book_interview_slot(ws.applicant_context(index), slot.id, ws.submission_ids[index])
                return "booked"
            except AlreadyBookedException:
                return "conflict"

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(attempt, range(8)))

        assert outcomes.count("booked") == 1
        assert outcomes.count("conflict") == 7
        assert len(notifier.of_kind("booked")) == 1

    def test_one_score_per_judge(self, workspace, steps, notifier):
        evaluation = EvaluationService(notifier=notifier)
        step = steps[1]
        values = criteria_scores(step, 7, 8)

        def attempt(_):
            try:
                evaluation.submit_score(workspace.judge_context(0), step["id"], workspace.submission_ids[0], values)
                return "created"
            except AlreadyScoredException:
                return "conflict"

        with ThreadPoolExecutor(max_workers=6) as pool:
            outcomes = list(pool.map(attempt, range(6)))

        assert outcomes.count("created") == 1
        assert len(evaluation.scores.list_by_submission(workspace.submission_ids[0])) == 1
