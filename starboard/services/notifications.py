"""
Notifications - Starboard Evaluation API
starboard/services/notifications.py

Applicant notifications raised by the step workflow and interview booking.
Delivery (email) lives outside this service; the shipped notifier records
one structured log event per notification for the delivery worker to pick up.
"""
from typing import Any, Dict, Iterable

import structlog

logger = structlog.get_logger(__name__)


class Notifier:
    """Interface for applicant notifications."""

    def submissions_advanced(
        self,
        application: Dict[str, Any],
        submissions: Iterable[Dict[str, Any]],
        step_name: str,
    ) -> None:
        raise NotImplementedError

    def submissions_admitted(self, application: Dict[str, Any], submissions: Iterable[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def slot_booked(self, application: Dict[str, Any], submission: Dict[str, Any], slot: Dict[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Emits a `notification_queued` event per recipient."""

    def _queue(self, kind: str, application: Dict[str, Any], submission: Dict[str, Any], **extra: Any) -> None:
        logger.info(
            "notification_queued",
            kind=kind,
            application_id=application["id"],
            application_title=application["title"],
            submission_id=submission["id"],
            recipient=submission["email"],
            **extra,
        )

    def submissions_advanced(self, application, submissions, step_name):
        for submission in submissions:
            self._queue("advanced_to_interview", application, submission, step_name=step_name)

    def submissions_admitted(self, application, submissions):
        for submission in submissions:
            self._queue("admitted", application, submission)

    def slot_booked(self, application, submission, slot):
        self._queue(
            "interview_booked",
            application,
            submission,
            slot_id=slot["id"],
            slot_date=slot["date"].isoformat(),
            start_time=slot["start_time"],
            end_time=slot["end_time"],
        )
