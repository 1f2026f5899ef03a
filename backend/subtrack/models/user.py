"""
User model - students, faculty reviewers and administrators.

Emails are stored lowercased so the unique index enforces
case-insensitive uniqueness.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, String, Index
from sqlalchemy.orm import relationship
from subtrack.database import Base
from subtrack.models.enums import Role, enum_check, enum_column_type


def utcnow():
    """Naive UTC timestamp, SQLite compatible."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """
    SQLAlchemy model for the users table.

    Users are created at registration and never deleted. Only the
    profile fields (name, dept, year) are ever mutated.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique user identifier")
    name = Column(Text, nullable=False,
                  doc="Display name")
    email = Column(String(255), nullable=False, unique=True,
                   doc="Lowercased login email")
    password_hash = Column(Text, nullable=False,
                           doc="bcrypt hash of the password, never exposed")
    role = Column(enum_column_type(Role), nullable=False, default=Role.STUDENT,
                  doc="student | faculty | admin")
    dept = Column(Text, nullable=False, default="",
                  doc="Department")
    year = Column(Text, nullable=False, default="",
                  doc="Academic year")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    submissions = relationship("Submission", back_populates="student",
                               foreign_keys="Submission.student_id")
    assigned_submissions = relationship("Submission", back_populates="assigned_faculty",
                                        foreign_keys="Submission.assigned_faculty_id")
    reviews = relationship("Review", back_populates="faculty")

    __table_args__ = (
        Index("ix_users_role", "role"),
        enum_check("role", Role, "ck_users_role"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
