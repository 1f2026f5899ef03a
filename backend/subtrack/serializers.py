"""
Response serializers - ORM objects to camelCase JSON dicts.

Password hashes never leave this module.
"""

from typing import Optional

from subtrack.models.review import Review
from subtrack.models.submission import Submission
from subtrack.models.user import User


def _iso(value):
    return value.isoformat() if value else None


def user_summary(user: Optional[User]) -> Optional[dict]:
    """Compact user reference embedded in submissions and reviews."""
    if user is None:
        return None
    return {"id": str(user.id), "name": user.name, "email": user.email}


def serialize_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "dept": user.dept,
        "year": user.year,
        "createdAt": _iso(user.created_at),
    }


def serialize_submission(submission: Submission, include_people: bool = False) -> dict:
    result = {
        "id": str(submission.id),
        "studentId": str(submission.student_id),
        "title": submission.title,
        "type": submission.type.value,
        "domain": submission.domain,
        "companyOrGuide": submission.company_or_guide,
        "filePath": submission.file_path,
        "status": submission.status.value,
        "assignedFacultyId": str(submission.assigned_faculty_id) if submission.assigned_faculty_id else None,
        "version": submission.version,
        "createdAt": _iso(submission.created_at),
        "updatedAt": _iso(submission.updated_at),
    }
    if include_people:
        student = submission.student
        result["student"] = {
            **user_summary(student),
            "dept": student.dept,
            "year": student.year,
        } if student else None
        result["assignedFaculty"] = user_summary(submission.assigned_faculty)
    return result


def serialize_review(review: Review, include_submission: bool = False) -> dict:
    result = {
        "id": str(review.id),
        "submissionId": str(review.submission_id),
        "facultyId": str(review.faculty_id),
        "faculty": user_summary(review.faculty),
        "remarks": review.remarks,
        "marks": review.marks,
        "decision": review.decision.value,
        "createdAt": _iso(review.created_at),
        "updatedAt": _iso(review.updated_at),
    }
    if include_submission and review.submission is not None:
        result["submission"] = {
            "id": str(review.submission.id),
            "title": review.submission.title,
            "type": review.submission.type.value,
            "status": review.submission.status.value,
            "student": user_summary(review.submission.student),
        }
    return result
