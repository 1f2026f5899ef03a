"""
Closed enumerations shared by the ORM models, services and routes.

All members are str-valued so they serialize directly into JSON and
compare equal to their wire representation.
"""

import enum

from sqlalchemy import CheckConstraint, Enum as SAEnum


class Role(str, enum.Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


class SubmissionType(str, enum.Enum):
    INTERNSHIP = "internship"
    PROJECT = "project"
    RESEARCH = "research"


class SubmissionStatus(str, enum.Enum):
    SUBMITTED = "Submitted"
    ASSIGNED = "Assigned"
    APPROVED = "Approved"
    RESUBMISSION_REQUIRED = "Resubmission Required"


class ReviewDecision(str, enum.Enum):
    APPROVED = "Approved"
    RESUBMISSION_REQUIRED = "Resubmission Required"

    @property
    def status(self) -> SubmissionStatus:
        """The submission status a review with this decision moves to."""
        return SubmissionStatus(self.value)


def enum_column_type(enum_cls):
    """Store an enum by its value in a plain VARCHAR column."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


def enum_check(column: str, enum_cls, name: str) -> CheckConstraint:
    """CHECK constraint limiting a column to the enum's values."""
    values = ", ".join("'{}'".format(m.value) for m in enum_cls)
    return CheckConstraint("{} IN ({})".format(column, values), name=name)
