"""
Faculty API routes - the reviewer's queue, past reviews, review action and
personal statistics. Every route requires the faculty role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from subtrack.dependencies import get_lifecycle, get_queries
from subtrack.guard import faculty_only
from subtrack.models.enums import ReviewDecision, SubmissionStatus
from subtrack.security import Claim
from subtrack.serializers import serialize_review, serialize_submission
from subtrack.services.lifecycle import LifecycleController
from subtrack.services.queries import QueryService

router = APIRouter(prefix="/faculty")


class ReviewRequest(BaseModel):
    """Schema for a review decision."""
    model_config = ConfigDict(populate_by_name=True)

    submission_id: str = Field(..., alias="submissionId", min_length=1)
    decision: ReviewDecision
    marks: int = Field(0, ge=0, le=100)
    remarks: str = Field("", max_length=1000)


@router.get("/assigned")
def assigned_submissions(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Results per page"),
    status: Optional[SubmissionStatus] = Query(None, description="Filter by status"),
    claim: Claim = Depends(faculty_only),
    queries: QueryService = Depends(get_queries),
):
    submissions, pagination = queries.assigned_to(claim.user_id, page, limit, status=status)
    return {
        "success": True,
        "submissions": [serialize_submission(s, include_people=True) for s in submissions],
        "pagination": pagination,
    }


@router.get("/reviews")
def my_reviews(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Results per page"),
    claim: Claim = Depends(faculty_only),
    queries: QueryService = Depends(get_queries),
):
    reviews, pagination = queries.reviews_by(claim.user_id, page, limit)
    return {
        "success": True,
        "reviews": [serialize_review(r, include_submission=True) for r in reviews],
        "pagination": pagination,
    }


@router.post("/review")
def review_submission(
    request: ReviewRequest,
    claim: Claim = Depends(faculty_only),
    lifecycle: LifecycleController = Depends(get_lifecycle),
):
    """Approve or request resubmission. Reviewing again replaces the earlier review."""
    review, new_status = lifecycle.review(
        claim,
        request.submission_id,
        request.decision,
        marks=request.marks,
        remarks=request.remarks.strip(),
    )
    return {
        "success": True,
        "message": "Reviewed",
        "review": serialize_review(review),
        "newStatus": new_status.value,
    }


@router.get("/stats")
def faculty_stats(
    claim: Claim = Depends(faculty_only),
    queries: QueryService = Depends(get_queries),
):
    return {"success": True, "stats": queries.faculty_stats(claim.user_id)}
