"""core roadworks tables

Revision ID: 0001_core_roadworks
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_core_roadworks"
down_revision = None
branch_labels = None
depends_on = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False, unique=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "wards",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False, unique=True),
        sa.Column("description", sa.String(length=512), nullable=True),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("status", sa.String(length=64), nullable=False, server_default=sa.text("'planning'")),
        sa.Column("ward_id", sa.Uuid(), sa.ForeignKey("wards.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_projects_ward_status", "projects", ["ward_id", "status"])

    op.create_table(
        "project_members",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "user_id", name="uq_project_member"),
    )
    op.create_index("ix_project_members_project", "project_members", ["project_id"])

    op.create_table(
        "road_segments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("geometry_json", JSON, nullable=False),
        sa.Column("length_meters", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_road_segments_project", "road_segments", ["project_id"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("road_segment_id", sa.Uuid(), sa.ForeignKey("road_segments.id"), nullable=False),
        sa.Column("contractor_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'active'")),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_assignments_window", "assignments", ["road_segment_id", "status", "start_at", "end_at"])
    op.create_index("ix_assignments_contractor", "assignments", ["contractor_id"])

    op.create_table(
        "milestones",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_milestones_project", "milestones", ["project_id"])

    op.create_table(
        "activity_entries",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("actor_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("milestone_id", sa.Uuid(), sa.ForeignKey("milestones.id"), nullable=True),
        sa.Column("action", sa.String(length=96), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("details_json", JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_activity_project_created", "activity_entries", ["project_id", "created_at", "id"])


def downgrade():
    op.drop_index("ix_activity_project_created", table_name="activity_entries")
    op.drop_table("activity_entries")
    op.drop_index("ix_milestones_project", table_name="milestones")
    op.drop_table("milestones")
    op.drop_index("ix_assignments_contractor", table_name="assignments")
    op.drop_index("ix_assignments_window", table_name="assignments")
    op.drop_table("assignments")
    op.drop_index("ix_road_segments_project", table_name="road_segments")
    op.drop_table("road_segments")
    op.drop_index("ix_project_members_project", table_name="project_members")
    op.drop_table("project_members")
    op.drop_index("ix_projects_ward_status", table_name="projects")
    op.drop_table("projects")
    op.drop_table("wards")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
