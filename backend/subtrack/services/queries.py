"""
Query Service - role-scoped, filtered, paginated reads and dashboards stats.

Scoping: admins see everything, faculty see what is assigned to them,
students see what they authored. Nothing here writes.
"""

import math
import time
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, joinedload

from subtrack.logging_config import get_logger, log_with_context
from subtrack.models.enums import Role, SubmissionStatus, SubmissionType
from subtrack.models.review import Review
from subtrack.models.submission import Submission
from subtrack.models.user import User
from subtrack.services.reviews import ReviewStore

logger = get_logger("db")

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def paginate(query: Query, page: int, limit: int, order_by) -> Tuple[List[Any], Dict[str, int]]:
    """Apply offset/limit and return (items, pagination)."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)
    total = query.order_by(None).count()
    items = query.order_by(order_by).offset((page - 1) * limit).limit(limit).all()
    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
    }


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return "%{}%".format(escaped)


class QueryService:

    def __init__(self, db: Session):
        self.db = db

    def _submissions(self) -> Query:
        return self.db.query(Submission).options(
            joinedload(Submission.student),
            joinedload(Submission.assigned_faculty),
        )

    # ── student ──────────────────────────────────────────────

    def student_submissions(self, student_id: str, page: int = 1,
                            limit: int = DEFAULT_LIMIT) -> Tuple[List[Submission], List[Review], Dict[str, int]]:
        """Own submissions for one page, plus every review of those submissions."""
        query = self._submissions().filter(Submission.student_id == student_id)
        submissions, pagination = paginate(query, page, limit, Submission.created_at.desc())
        reviews = ReviewStore(self.db).list_for_submissions([s.id for s in submissions])
        return submissions, reviews, pagination

    # ── admin ────────────────────────────────────────────────

    def users(self, page: int = 1, limit: int = DEFAULT_LIMIT, search: Optional[str] = None,
              role: Optional[Role] = None) -> Tuple[List[User], Dict[str, int]]:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if search:
            pattern = _like(search.strip())
            query = query.filter(or_(
                User.name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            ))
        return paginate(query, page, limit, User.created_at.desc())

    def all_submissions(self, page: int = 1, limit: int = DEFAULT_LIMIT,
                        status: Optional[SubmissionStatus] = None,
                        type: Optional[SubmissionType] = None,
                        search: Optional[str] = None) -> Tuple[List[Submission], Dict[str, int]]:
        start_time = time.time()
        query = self._submissions()
        if status is not None:
            query = query.filter(Submission.status == status)
        if type is not None:
            query = query.filter(Submission.type == type)
        if search:
            pattern = _like(search.strip())
            query = query.filter(or_(
                Submission.title.ilike(pattern, escape="\\"),
                Submission.domain.ilike(pattern, escape="\\"),
                Submission.company_or_guide.ilike(pattern, escape="\\"),
            ))
        items, pagination = paginate(query, page, limit, Submission.created_at.desc())

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO",
            "Listed {} submissions (page {}, total {})".format(len(items), pagination["page"], pagination["total"]),
            extra_data={"duration_ms": round(duration_ms, 2)})
        return items, pagination

    def faculty_members(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == Role.FACULTY)
            .order_by(User.name.asc())
            .all()
        )

    def admin_stats(self) -> Dict[str, Any]:
        users_by_role = dict(
            self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        )
        subs_by_status = dict(
            self.db.query(Submission.status, func.count(Submission.id)).group_by(Submission.status).all()
        )
        return {
            "users": {
                "total": sum(users_by_role.values()),
                **{r.value: users_by_role.get(r, 0) for r in Role},
            },
            "submissions": {
                "total": sum(subs_by_status.values()),
                **{s.value: subs_by_status.get(s, 0) for s in SubmissionStatus},
            },
            "reviews": self.db.query(func.count(Review.id)).scalar() or 0,
        }

    # ── faculty ──────────────────────────────────────────────

    def assigned_to(self, faculty_id: str, page: int = 1, limit: int = DEFAULT_LIMIT,
                    status: Optional[SubmissionStatus] = None) -> Tuple[List[Submission], Dict[str, int]]:
        query = self._submissions().filter(Submission.assigned_faculty_id == faculty_id)
        if status is not None:
            query = query.filter(Submission.status == status)
        return paginate(query, page, limit, Submission.created_at.desc())

    def reviews_by(self, faculty_id: str, page: int = 1,
                   limit: int = DEFAULT_LIMIT) -> Tuple[List[Review], Dict[str, int]]:
        query = (
            self.db.query(Review)
            .options(joinedload(Review.submission).joinedload(Submission.student))
            .filter(Review.faculty_id == faculty_id)
        )
        return paginate(query, page, limit, Review.updated_at.desc())

    def faculty_stats(self, faculty_id: str) -> Dict[str, Any]:
        by_status = dict(
            self.db.query(Submission.status, func.count(Submission.id))
            .filter(Submission.assigned_faculty_id == faculty_id)
            .group_by(Submission.status)
            .all()
        )
        review_count, average = (
            self.db.query(func.count(Review.id), func.avg(Review.marks))
            .filter(Review.faculty_id == faculty_id)
            .one()
        )
        return {
            "assigned": {
                "total": sum(by_status.values()),
                **{s.value: by_status.get(s, 0) for s in SubmissionStatus},
            },
            "reviews": review_count or 0,
            "averageMarks": round(float(average), 2) if average is not None else None,
        }
