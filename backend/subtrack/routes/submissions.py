"""
Submission API routes - student uploads, the student's own list and the
single-submission view shared by all roles.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from subtrack.config import Settings, get_settings
from subtrack.dependencies import get_lifecycle, get_queries
from subtrack.errors import InvalidInput
from subtrack.guard import authenticated, student_only
from subtrack.models.enums import SubmissionType
from subtrack.security import Claim
from subtrack.serializers import serialize_review, serialize_submission
from subtrack.services.lifecycle import LifecycleController
from subtrack.services.queries import QueryService

router = APIRouter(prefix="/submissions")


@router.post("/upload", status_code=201)
def upload_submission(
    title: str = Form(..., min_length=1, max_length=200),
    type: SubmissionType = Form(..., description="internship | project | research"),
    domain: str = Form("", max_length=100),
    company_or_guide: str = Form("", alias="companyOrGuide", max_length=100),
    report: Optional[UploadFile] = File(None, description="PDF report"),
    claim: Claim = Depends(student_only),
    settings: Settings = Depends(get_settings),
    lifecycle: LifecycleController = Depends(get_lifecycle),
):
    """
    Upload a PDF report with its metadata.

    The submission always belongs to the authenticated student; any
    studentId sent in the form is ignored.
    """
    if not title.strip():
        raise InvalidInput("Title is required")
    if report is None or not report.filename:
        raise InvalidInput("PDF required")

    # One byte past the limit is enough to know it is too large
    content = report.file.read(settings.max_upload_bytes + 1)
    submission = lifecycle.upload(
        claim,
        title=title.strip(),
        type=type,
        filename=report.filename,
        content=content,
        domain=domain.strip(),
        company_or_guide=company_or_guide.strip(),
    )
    return {"success": True, "message": "Uploaded", "submission": serialize_submission(submission)}


@router.get("/mine")
def my_submissions(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Results per page"),
    claim: Claim = Depends(student_only),
    queries: QueryService = Depends(get_queries),
):
    """The student's own submissions with every review they received."""
    submissions, reviews, pagination = queries.student_submissions(claim.user_id, page, limit)
    return {
        "success": True,
        "submissions": [serialize_submission(s, include_people=True) for s in submissions],
        "reviews": [serialize_review(r) for r in reviews],
        "pagination": pagination,
    }


@router.get("/{submission_id}")
def get_submission(
    submission_id: str,
    claim: Claim = Depends(authenticated),
    lifecycle: LifecycleController = Depends(get_lifecycle),
):
    submission, reviews = lifecycle.view(claim, submission_id)
    return {
        "success": True,
        "submission": serialize_submission(submission, include_people=True),
        "reviews": [serialize_review(r) for r in reviews],
    }
