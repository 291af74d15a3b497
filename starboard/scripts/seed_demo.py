#!/usr/bin/env python
"""
Seed a demo workspace for local development.

Creates the schema (SQLite backend) and one workspace with:
  1. Roles: admin (all evaluation permissions), judge (score + view), viewer
  2. Members: one admin, N judges
  3. One application with default evaluation settings
  4. M submissions at step 1, each owned by an applicant user

Prints the generated ids so they can be used with the X-User-Id header.

Usage:
    python -m starboard.scripts.seed_demo
    python -m starboard.scripts.seed_demo --judges 4 --submissions 10
    python -m starboard.scripts.seed_demo --title "Spring Cohort" --with-steps
"""

import argparse
import logging
from typing import Dict, List
from uuid import uuid4

from starboard.config import get_settings
from starboard.models.enumerations import Permission, StepType
from starboard.repositories.application_repository import ApplicationRepository
from starboard.repositories.member_repository import MemberRepository
from starboard.repositories.step_repository import StepRepository
from starboard.repositories.submission_repository import SubmissionRepository
from starboard.services.database import init_schema

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

ADMIN_PERMISSIONS = list(Permission)
JUDGE_PERMISSIONS = [
    Permission.WORKSPACE_VIEW,
    Permission.APPLICATIONS_VIEW,
    Permission.EVALUATION_SCORE,
    Permission.EVALUATION_VIEW_SCORES,
]
VIEWER_PERMISSIONS = [Permission.WORKSPACE_VIEW, Permission.APPLICATIONS_VIEW]

DEMO_COMPANIES = [
    "Northwind Robotics", "Bluefin Analytics", "Helio Grid", "Quill Health",
    "Tidepool Labs", "Orbital Foods", "Lumen Ledger", "Cedar Mobility",
]

DEMO_CRITERIA = {
    1: [{"name": "Innovation", "weight": 1.0}, {"name": "Execution", "weight": 1.0}, {"name": "Team", "weight": 2.0}],
    2: [{"name": "Communication", "weight": 1.0}, {"name": "Vision", "weight": 1.0}],
}


def seed(title: str, judges: int, submissions: int, with_steps: bool) -> Dict:
    """Create a demo workspace and return the generated ids."""
    members = MemberRepository()
    applications = ApplicationRepository()
    submission_repo = SubmissionRepository()

    workspace_id = str(uuid4())
    admin_role = members.create_role(workspace_id, "Admin", ADMIN_PERMISSIONS)
    judge_role = members.create_role(workspace_id, "Judge", JUDGE_PERMISSIONS)
    members.create_role(workspace_id, "Viewer", VIEWER_PERMISSIONS)

    admin_id = str(uuid4())
    members.add_member(workspace_id, admin_id, admin_role["id"])

    judge_ids: List[str] = []
    for _ in range(judges):
        judge_id = str(uuid4())
        members.add_member(workspace_id, judge_id, judge_role["id"])
        judge_ids.append(judge_id)

    application = applications.create(workspace_id, title)

    submission_ids: List[Dict[str, str]] = []
    for i in range(submissions):
        applicant_id = str(uuid4())
        company = DEMO_COMPANIES[i % len(DEMO_COMPANIES)]
        submission = submission_repo.create(
            application_id=application["id"],
            first_name="Applicant",
            last_name=str(i + 1),
            email=f"applicant{i + 1}@example.com",
            company_name=company,
            applicant_user_id=applicant_id,
        )
        submission_ids.append({"submission_id": submission["id"], "applicant_user_id": applicant_id})

    if with_steps:
        StepRepository().create_steps(
            application["id"],
            [
                {"step_number": 1, "name": "Initial Review", "type": StepType.INITIAL_REVIEW,
                 "is_active": True, "criteria": DEMO_CRITERIA[1]},
                {"step_number": 2, "name": "Interview Round", "type": StepType.INTERVIEW,
                 "is_active": False, "criteria": DEMO_CRITERIA[2]},
            ],
        )

    return {
        "workspace_id": workspace_id,
        "application_id": application["id"],
        "admin_user_id": admin_id,
        "judge_user_ids": judge_ids,
        "submissions": submission_ids,
    }


def main():
    parser = argparse.ArgumentParser(description="Seed a demo evaluation workspace")
    parser.add_argument("--title", default="Demo Accelerator Cohort", help="Application title")
    parser.add_argument("--judges", type=int, default=3, help="Number of judges")
    parser.add_argument("--submissions", type=int, default=6, help="Number of submissions")
    parser.add_argument("--with-steps", action="store_true", help="Also create both evaluation steps")
    args = parser.parse_args()

    if args.judges < 0 or args.submissions < 0:
        parser.error("--judges and --submissions must be >= 0")

    settings = get_settings()
    if settings.DB_BACKEND == "sqlite":
        logger.info(f"Initialising SQLite schema at {settings.SQLITE_PATH}")
        init_schema()

    result = seed(args.title, args.judges, args.submissions, args.with_steps)

    logger.info("=" * 60)
    logger.info(f"Workspace:   {result['workspace_id']}")
    logger.info(f"Application: {result['application_id']}")
    logger.info(f"Admin user:  {result['admin_user_id']}")
    for judge_id in result["judge_user_ids"]:
        logger.info(f"Judge user:  {judge_id}")
    for entry in result["submissions"]:
        logger.info(f"Submission:  {entry['submission_id']} (applicant {entry['applicant_user_id']})")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
