"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

Creates all database tables for SubTrack:
- users: accounts for students, faculty and admins
- submissions: uploaded reports with lifecycle status
- reviews: faculty decisions, one row per (submission, faculty)

Also creates indexes for common query patterns.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Users Table ───────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.String(32), nullable=False, server_default='student'),
        sa.Column('dept', sa.Text(), nullable=False, server_default=''),
        sa.Column('year', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('student', 'faculty', 'admin')", name='ck_users_role'),
    )
    op.create_index('ix_users_role', 'users', ['role'])

    # ── Submissions Table ─────────────────────────────────────
    op.create_table(
        'submissions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('domain', sa.Text(), nullable=False, server_default=''),
        sa.Column('company_or_guide', sa.Text(), nullable=False, server_default=''),
        sa.Column('file_path', sa.Text(), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='Submitted'),
        sa.Column('assigned_faculty_id', sa.String(36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("type IN ('internship', 'project', 'research')", name='ck_submissions_type'),
        sa.CheckConstraint(
            "status IN ('Submitted', 'Assigned', 'Approved', 'Resubmission Required')",
            name='ck_submissions_status'),
        # Unassigned exactly while still Submitted
        sa.CheckConstraint(
            "(status = 'Submitted') = (assigned_faculty_id IS NULL)",
            name='ck_submissions_assignment'),
    )

    op.create_index('ix_submissions_student_id', 'submissions', ['student_id'])
    op.create_index('ix_submissions_assigned_faculty_id', 'submissions', ['assigned_faculty_id'])
    op.create_index('ix_submissions_status', 'submissions', ['status'])
    op.create_index('ix_submissions_created_at', 'submissions', ['created_at'])

    # ── Reviews Table ─────────────────────────────────────────
    op.create_table(
        'reviews',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('submission_id', sa.String(36), sa.ForeignKey('submissions.id'), nullable=False),
        sa.Column('faculty_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=False, server_default=''),
        sa.Column('marks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('decision', sa.String(32), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('submission_id', 'faculty_id', name='uq_reviews_submission_faculty'),
        sa.CheckConstraint('marks BETWEEN 0 AND 100', name='ck_reviews_marks'),
        sa.CheckConstraint(
            "decision IN ('Approved', 'Resubmission Required')", name='ck_reviews_decision'),
    )

    op.create_index('ix_reviews_faculty_id', 'reviews', ['faculty_id'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index('ix_reviews_faculty_id', table_name='reviews')
    op.drop_table('reviews')
    op.drop_index('ix_submissions_created_at', table_name='submissions')
    op.drop_index('ix_submissions_status', table_name='submissions')
    op.drop_index('ix_submissions_assigned_faculty_id', table_name='submissions')
    op.drop_index('ix_submissions_student_id', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_table('users')
