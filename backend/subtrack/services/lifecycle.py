"""
Lifecycle Controller - enforces who may move a submission where.

State machine:
    (none)    --upload (student)--> Submitted
    Submitted --assign (admin)----> Assigned
    Assigned  --assign (admin)----> Assigned (reassign; same faculty is a no-op)
    any state with an assigned faculty
              --review (that faculty)--> Approved | Resubmission Required

Every check runs before anything is written. Resubmission Required is
terminal: a student who must resubmit uploads a new submission.
"""

import time
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from subtrack.config import Settings
from subtrack.errors import Conflict, Forbidden, InvalidInput, NotFound
from subtrack.logging_config import get_logger, log_with_context
from subtrack.models.enums import ReviewDecision, Role, SubmissionStatus, SubmissionType
from subtrack.models.review import Review
from subtrack.models.submission import Submission
from subtrack.models.user import User
from subtrack.security import Claim
from subtrack.services.reviews import ReviewStore
from subtrack.services.storage import ReportStorage
from subtrack.services.submissions import SubmissionStore

logger = get_logger("lifecycle")

ASSIGNABLE = (SubmissionStatus.SUBMITTED, SubmissionStatus.ASSIGNED)


def _require_actor(claim: Claim, role: Role):
    if claim.role is not role:
        raise Forbidden("Forbidden: Role mismatch")


class LifecycleController:

    def __init__(self, db: Session, settings: Settings,
                 storage: Optional[ReportStorage] = None):
        self.db = db
        self.settings = settings
        self.storage = storage or ReportStorage(settings.upload_dir)
        self.submissions = SubmissionStore(db)
        self.reviews = ReviewStore(db)

    # ── upload ───────────────────────────────────────────────

    def upload(self, claim: Claim, title: str, type: SubmissionType,
               filename: str, content: bytes,
               domain: str = "", company_or_guide: str = "") -> Submission:
        """
        Store the report and create a Submitted record owned by the caller.

        The owner is always the authenticated student; nothing in the
        request can choose it.
        """
        _require_actor(claim, Role.STUDENT)
        if not content:
            raise InvalidInput("PDF required")
        if len(content) > self.settings.max_upload_bytes:
            raise InvalidInput("File too large")

        file_path = self.storage.save(filename, content)
        if not self.storage.is_pdf(file_path):
            self.storage.discard(file_path)
            raise InvalidInput("Only PDF allowed")

        try:
            submission = self.submissions.create(
                student_id=claim.user_id,
                title=title,
                type=type,
                file_path=file_path,
                domain=domain,
                company_or_guide=company_or_guide,
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self.storage.discard(file_path)
            raise
        self.db.refresh(submission)

        log_with_context(logger, "INFO", "Submission uploaded: {}".format(submission.title),
                         context={"submission_id": submission.id, "student_id": claim.user_id},
                         extra_data={"type": submission.type.value, "file_path": file_path})
        return submission

    # ── assign ───────────────────────────────────────────────

    def assign(self, claim: Claim, submission_id: str, faculty_id: str) -> Submission:
        """
        Point a submission at a faculty reviewer.

        Re-assigning the faculty already assigned changes nothing, not even
        updated_at. A reviewed submission can no longer be reassigned.
        """
        _require_actor(claim, Role.ADMIN)

        submission = self.submissions.get(submission_id)
        if submission is None:
            raise NotFound("Submission not found")

        faculty = self.db.get(User, faculty_id)
        if faculty is None or faculty.role is not Role.FACULTY:
            raise NotFound("Faculty not found")

        if submission.status not in ASSIGNABLE:
            raise InvalidInput("Submission already reviewed ({})".format(submission.status.value))

        if submission.status is SubmissionStatus.ASSIGNED and submission.assigned_faculty_id == faculty_id:
            log_with_context(logger, "INFO", "Assignment unchanged",
                             context={"submission_id": submission.id, "faculty_id": faculty_id})
            return submission

        previous = submission.assigned_faculty_id
        self.submissions.assign(submission, faculty_id)
        self.db.commit()
        self.db.refresh(submission)

        log_with_context(logger, "INFO", "Submission assigned to {}".format(faculty.name),
                         context={"submission_id": submission.id, "faculty_id": faculty_id,
                                  "admin_id": claim.user_id},
                         extra_data={"previous_faculty_id": previous})
        return submission

    # ── review ───────────────────────────────────────────────

    def review(self, claim: Claim, submission_id: str, decision: ReviewDecision,
               marks: int = 0, remarks: str = "") -> Tuple[Review, SubmissionStatus]:
        """
        Record the assigned faculty's decision.

        The pair's review is created or overwritten, the submission takes the
        decision as its status and version goes up by one. The write only
        applies if the version is unchanged and the caller is still the
        assigned faculty. Otherwise the whole action is rolled back: a
        reassignment in between gives Forbidden, another review gives
        Conflict.
        """
        start_time = time.time()
        _require_actor(claim, Role.FACULTY)

        submission = self.submissions.get(submission_id)
        if submission is None:
            raise NotFound("Submission not found")
        if submission.assigned_faculty_id != claim.user_id:
            raise Forbidden("Not assigned to you")
        if not 0 <= marks <= 100:
            raise InvalidInput("Marks must be between 0 and 100")

        expected_version = submission.version
        new_status = decision.status

        review, created = self.reviews.upsert(
            submission_id=submission.id,
            faculty_id=claim.user_id,
            decision=decision,
            marks=marks,
            remarks=remarks,
        )
        if not self.submissions.record_decision(submission_id, expected_version,
                                                claim.user_id, new_status):
            self.db.rollback()
            log_with_context(logger, "WARNING", "Concurrent change detected during review",
                             context={"submission_id": submission_id, "faculty_id": claim.user_id},
                             extra_data={"expected_version": expected_version})
            current = self.submissions.get(submission_id)
            if current is None:
                raise NotFound("Submission not found")
            if current.assigned_faculty_id != claim.user_id:
                raise Forbidden("Not assigned to you")
            raise Conflict("Submission was modified concurrently, retry the review")
        self.db.commit()
        self.db.refresh(review)

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO",
            "Submission reviewed: {} (marks={})".format(new_status.value, marks),
            context={"submission_id": submission_id, "faculty_id": claim.user_id,
                     "review_id": review.id},
            extra_data={"version": expected_version + 1, "new_review": created,
                        "duration_ms": round(duration_ms, 2)})
        return review, new_status

    # ── view ─────────────────────────────────────────────────

    def view(self, claim: Claim, submission_id: str) -> Tuple[Submission, List[Review]]:
        """Fetch one submission if the caller may see it."""
        submission = self.submissions.get(submission_id, with_people=True)
        if submission is None:
            raise NotFound("Submission not found")

        if claim.role is Role.STUDENT:
            allowed = submission.student_id == claim.user_id
        elif claim.role is Role.FACULTY:
            allowed = submission.assigned_faculty_id == claim.user_id
        elif claim.role is Role.ADMIN:
            allowed = True
        else:
            raise AssertionError("Unhandled role {!r}".format(claim.role))

        if not allowed:
            raise Forbidden("You do not have access to this submission")

        return submission, self.reviews.list_for_submissions([submission.id])
