"""
Submission model - a student-authored report plus its review status.

This is the central entity of the platform. Status moves through:
- Submitted: uploaded, no faculty assigned yet
- Assigned: an admin picked a faculty reviewer
- Approved / Resubmission Required: the assigned faculty reviewed it
"""

import uuid
from sqlalchemy import CheckConstraint, Column, Text, DateTime, ForeignKey, Index, String, Integer
from sqlalchemy.orm import relationship
from subtrack.database import Base
from subtrack.models.enums import SubmissionStatus, SubmissionType, enum_check, enum_column_type
from subtrack.models.user import utcnow


class Submission(Base):
    """
    SQLAlchemy model for the submissions table.

    assigned_faculty_id is NULL exactly while status is Submitted, and
    version only moves when a review is recorded.
    """
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique submission identifier")
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False,
                        doc="Owning student; never changes after creation")
    title = Column(Text, nullable=False)
    type = Column(enum_column_type(SubmissionType), nullable=False,
                  doc="internship | project | research")
    domain = Column(Text, nullable=False, default="")
    company_or_guide = Column(Text, nullable=False, default="",
                              doc="Internship company or project guide")
    file_path = Column(Text, nullable=False,
                       doc="Public path of the stored PDF, e.g. /uploads/<name>")
    status = Column(enum_column_type(SubmissionStatus), nullable=False,
                    default=SubmissionStatus.SUBMITTED)
    assigned_faculty_id = Column(String(36), ForeignKey("users.id"), nullable=True,
                                 doc="Faculty reviewer, NULL until assigned")
    version = Column(Integer, nullable=False, default=1,
                     doc="Incremented once per recorded review")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    student = relationship("User", back_populates="submissions", foreign_keys=[student_id])
    assigned_faculty = relationship("User", back_populates="assigned_submissions",
                                    foreign_keys=[assigned_faculty_id])
    reviews = relationship("Review", back_populates="submission",
                           order_by="Review.created_at.desc()")

    __table_args__ = (
        Index("ix_submissions_student_id", "student_id"),
        Index("ix_submissions_assigned_faculty_id", "assigned_faculty_id"),
        Index("ix_submissions_status", "status"),
        Index("ix_submissions_created_at", "created_at"),
        enum_check("type", SubmissionType, "ck_submissions_type"),
        enum_check("status", SubmissionStatus, "ck_submissions_status"),
        # unassigned exactly while still Submitted
        CheckConstraint("(status = 'Submitted') = (assigned_faculty_id IS NULL)",
                        name="ck_submissions_assignment"),
    )

    def __repr__(self):
        return f"<Submission(id={self.id}, student={self.student_id}, status='{self.status.value}', v={self.version})>"
