"""
Review model - a faculty decision and feedback on one submission.

There is at most one row per (submission, faculty) pair; reviewing again
updates that row in place. Reviews are never deleted.
"""

import uuid
from sqlalchemy import CheckConstraint, Column, Text, DateTime, ForeignKey, String, Integer, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from subtrack.database import Base
from subtrack.models.enums import ReviewDecision, enum_check, enum_column_type
from subtrack.models.user import utcnow


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique review identifier")
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=False)
    faculty_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    remarks = Column(Text, nullable=False, default="")
    marks = Column(Integer, nullable=False, default=0,
                   doc="0..100")
    decision = Column(enum_column_type(ReviewDecision), nullable=False,
                      doc="Approved | Resubmission Required")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    submission = relationship("Submission", back_populates="reviews")
    faculty = relationship("User", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("submission_id", "faculty_id", name="uq_reviews_submission_faculty"),
        Index("ix_reviews_faculty_id", "faculty_id"),
        CheckConstraint("marks BETWEEN 0 AND 100", name="ck_reviews_marks"),
        enum_check("decision", ReviewDecision, "ck_reviews_decision"),
    )

    def __repr__(self):
        return f"<Review(id={self.id}, submission={self.submission_id}, decision='{self.decision.value}', marks={self.marks})>"
