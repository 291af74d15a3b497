"""
Repositories Package - Starboard Evaluation API
starboard/repositories/__init__.py

Data access layer over Snowflake (production) or SQLite (development, tests).
"""

from starboard.repositories.base import BaseRepository
from starboard.repositories.application_repository import ApplicationRepository
from starboard.repositories.member_repository import MemberRepository
from starboard.repositories.score_repository import ScoreRepository
from starboard.repositories.slot_repository import SlotRepository
from starboard.repositories.step_repository import StepRepository
from starboard.repositories.submission_repository import SubmissionRepository

__all__ = [
    "BaseRepository",
    "ApplicationRepository",
    "MemberRepository",
    "ScoreRepository",
    "SlotRepository",
    "StepRepository",
    "SubmissionRepository",
]
