"""
Admin API routes - user and submission oversight, faculty assignment and
dashboard statistics. Every route requires the admin role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from subtrack.dependencies import get_lifecycle, get_queries
from subtrack.guard import admin_only
from subtrack.models.enums import Role, SubmissionStatus, SubmissionType
from subtrack.security import Claim
from subtrack.serializers import serialize_submission, serialize_user
from subtrack.services.lifecycle import LifecycleController
from subtrack.services.queries import QueryService

router = APIRouter(prefix="/admin", dependencies=[Depends(admin_only)])


class AssignRequest(BaseModel):
    """Schema for assigning a faculty reviewer."""
    model_config = ConfigDict(populate_by_name=True)

    submission_id: str = Field(..., alias="submissionId", min_length=1)
    faculty_id: str = Field(..., alias="facultyId", min_length=1)


@router.get("/users")
def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Results per page"),
    search: Optional[str] = Query(None, description="Search name/email"),
    role: Optional[Role] = Query(None, description="Filter by role"),
    queries: QueryService = Depends(get_queries),
):
    users, pagination = queries.users(page, limit, search=search, role=role)
    return {
        "success": True,
        "users": [serialize_user(u) for u in users],
        "pagination": pagination,
    }


@router.get("/submissions")
def list_submissions(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Results per page"),
    status: Optional[SubmissionStatus] = Query(None, description="Filter by status"),
    type: Optional[SubmissionType] = Query(None, description="Filter by type"),
    search: Optional[str] = Query(None, description="Search title/domain/company"),
    queries: QueryService = Depends(get_queries),
):
    """All submissions with student and assigned faculty summaries."""
    submissions, pagination = queries.all_submissions(page, limit, status=status, type=type, search=search)
    return {
        "success": True,
        "submissions": [serialize_submission(s, include_people=True) for s in submissions],
        "pagination": pagination,
    }


@router.get("/faculty")
def list_faculty(queries: QueryService = Depends(get_queries)):
    """Every faculty account, for the assignment picker."""
    return {
        "success": True,
        "faculty": [serialize_user(u) for u in queries.faculty_members()],
    }


@router.post("/assign")
def assign_faculty(
    request: AssignRequest,
    claim: Claim = Depends(admin_only),
    lifecycle: LifecycleController = Depends(get_lifecycle),
):
    submission = lifecycle.assign(claim, request.submission_id, request.faculty_id)
    return {"success": True, "message": "Assigned", "submission": serialize_submission(submission)}


@router.get("/stats")
def admin_stats(queries: QueryService = Depends(get_queries)):
    return {"success": True, "stats": queries.admin_stats()}
