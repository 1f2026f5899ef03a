"""
Submission Store - persistence and status transitions for submissions.

The store only stages changes on the session; the lifecycle controller
decides when a transition is allowed and commits.
"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from subtrack.logging_config import get_logger, log_with_context
from subtrack.models.enums import SubmissionStatus, SubmissionType
from subtrack.models.submission import Submission
from subtrack.models.user import utcnow

logger = get_logger("db")


class SubmissionStore:

    def __init__(self, db: Session):
        self.db = db

    def get(self, submission_id: str, with_people: bool = False) -> Optional[Submission]:
        query = self.db.query(Submission)
        if with_people:
            query = query.options(
                joinedload(Submission.student),
                joinedload(Submission.assigned_faculty),
            )
        return query.filter(Submission.id == submission_id).first()

    def create(self, student_id: str, title: str, type: SubmissionType, file_path: str,
               domain: str = "", company_or_guide: str = "") -> Submission:
        now = utcnow()
        submission = Submission(
            student_id=student_id,
            title=title,
            type=type,
            domain=domain,
            company_or_guide=company_or_guide,
            file_path=file_path,
            status=SubmissionStatus.SUBMITTED,
            assigned_faculty_id=None,
            version=1,
            created_at=now,
            updated_at=now,
        )
        self.db.add(submission)
        self.db.flush()
        log_with_context(logger, "DEBUG", "Staged submission {}".format(submission.id),
                         context={"submission_id": submission.id, "student_id": student_id})
        return submission

    def assign(self, submission: Submission, faculty_id: str) -> Submission:
        """Move to Assigned with the given reviewer."""
        submission.assigned_faculty_id = faculty_id
        submission.status = SubmissionStatus.ASSIGNED
        submission.updated_at = utcnow()
        self.db.flush()
        return submission

    def record_decision(self, submission_id: str, expected_version: int,
                        faculty_id: str, status: SubmissionStatus) -> bool:
        """
        Set the review outcome and bump version, but only if the row still
        carries expected_version and is still assigned to faculty_id.
        Returns False when another writer got there first.
        """
        result = self.db.execute(
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.version == expected_version,
                Submission.assigned_faculty_id == faculty_id,
            )
            .values(status=status, version=Submission.version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

