"""
Review Store - one current review per (submission, faculty) pair.
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session, joinedload

from subtrack.logging_config import get_logger, log_with_context
from subtrack.models.enums import ReviewDecision
from subtrack.models.review import Review
from subtrack.models.user import utcnow

logger = get_logger("db")


class ReviewStore:

    def __init__(self, db: Session):
        self.db = db

    def get_for_pair(self, submission_id: str, faculty_id: str) -> Optional[Review]:
        return (
            self.db.query(Review)
            .filter(Review.submission_id == submission_id, Review.faculty_id == faculty_id)
            .first()
        )

    def upsert(self, submission_id: str, faculty_id: str, decision: ReviewDecision,
               marks: int = 0, remarks: str = "") -> Tuple[Review, bool]:
        """
        Create the pair's review or overwrite it in place.

        Returns (review, created).
        """
        review = self.get_for_pair(submission_id, faculty_id)
        now = utcnow()
        created = review is None
        if created:
            review = Review(
                submission_id=submission_id,
                faculty_id=faculty_id,
                created_at=now,
            )
            self.db.add(review)
        review.decision = decision
        review.marks = marks
        review.remarks = remarks
        review.updated_at = now
        self.db.flush()

        log_with_context(logger, "DEBUG",
            "{} review {}".format("Staged new" if created else "Updated", review.id),
            context={"submission_id": submission_id, "faculty_id": faculty_id})
        return review, created

    def list_for_submissions(self, submission_ids: Sequence[str]) -> List[Review]:
        if not submission_ids:
            return []
        return (
            self.db.query(Review)
            .options(joinedload(Review.faculty))
            .filter(Review.submission_id.in_(list(submission_ids)))
            .order_by(Review.created_at.desc())
            .all()
        )

