from subtrack.models.enums import Role, SubmissionType, SubmissionStatus, ReviewDecision
from subtrack.models.user import User
from subtrack.models.submission import Submission
from subtrack.models.review import Review

__all__ = [
    "Role", "SubmissionType", "SubmissionStatus", "ReviewDecision",
    "User", "Submission", "Review",
]
