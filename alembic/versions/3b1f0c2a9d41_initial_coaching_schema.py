"""initial coaching schema

Revision ID: 3b1f0c2a9d41
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b1f0c2a9d41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("role", sa.String(length=7), nullable=False),
        sa.Column("profile_picture_url", sa.String(), nullable=True),
        sa.Column("bio", sa.String(), nullable=True),
        sa.Column("instagram", sa.String(), nullable=True),
        sa.Column("personal_trainer_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["personal_trainer_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_personal_trainer_id", "users", ["personal_trainer_id"])

    op.create_table(
        "fitness_profiles",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("height_cm", sa.Float(), nullable=True),
        sa.Column("fitness_level", sa.String(length=12), nullable=True),
        sa.Column("fitness_goal", sa.String(length=12), nullable=True),
        sa.Column("workout_frequency", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "pt_trainees",
        sa.Column("pt_id", sa.Uuid(), nullable=False),
        sa.Column("trainee_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["pt_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["trainee_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("pt_id", "trainee_id"),
    )

    op.create_table(
        "trainee_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("pt_id", sa.Uuid(), nullable=False),
        sa.Column("trainee_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=8), nullable=False),
        sa.Column("service_name", sa.String(), nullable=False),
        sa.Column("request_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("response_date", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["pt_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["trainee_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_trainee_requests_pt_trainee_status", "trainee_requests", ["pt_id", "trainee_id", "status"]
    )

    op.create_table(
        "workout_templates",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("difficulty", sa.String(length=12), nullable=True),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workout_templates_created_by", "workout_templates", ["created_by"])

    op.create_table(
        "template_exercises",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("template_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sets", sa.Integer(), nullable=False),
        sa.Column("reps", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["template_id"], ["workout_templates.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_template_exercises_template_id", "template_exercises", ["template_id"])

    op.create_table(
        "workout_assignments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("template_id", sa.Uuid(), nullable=False),
        sa.Column("trainee_id", sa.Uuid(), nullable=False),
        sa.Column("pt_id", sa.Uuid(), nullable=False),
        sa.Column("assigned_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=11), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trainee_notes", sa.Text(), nullable=True),
        sa.Column("pt_notes", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["template_id"], ["workout_templates.id"]),
        sa.ForeignKeyConstraint(["trainee_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["pt_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workout_assignments_template_id", "workout_assignments", ["template_id"])
    op.create_index("ix_workout_assignments_trainee_date", "workout_assignments", ["trainee_id", "assigned_date"])
    op.create_index("ix_workout_assignments_pt_date", "workout_assignments", ["pt_id", "assigned_date"])

    op.create_table(
        "exercise_progress",
        sa.Column("assignment_id", sa.Uuid(), nullable=False),
        sa.Column("exercise_index", sa.Integer(), nullable=False),
        sa.Column("exercise_name", sa.String(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_sets", sa.Integer(), nullable=True),
        sa.Column("actual_reps", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["assignment_id"], ["workout_assignments.id"]),
        sa.PrimaryKeyConstraint("assignment_id", "exercise_index"),
    )


def downgrade() -> None:
    op.drop_table("exercise_progress")
    op.drop_index("ix_workout_assignments_pt_date", table_name="workout_assignments")
    op.drop_index("ix_workout_assignments_trainee_date", table_name="workout_assignments")
    op.drop_index("ix_workout_assignments_template_id", table_name="workout_assignments")
    op.drop_table("workout_assignments")
    op.drop_index("ix_template_exercises_template_id", table_name="template_exercises")
    op.drop_table("template_exercises")
    op.drop_index("ix_workout_templates_created_by", table_name="workout_templates")
    op.drop_table("workout_templates")
    op.drop_index("ix_trainee_requests_pt_trainee_status", table_name="trainee_requests")
    op.drop_table("trainee_requests")
    op.drop_table("pt_trainees")
    op.drop_table("fitness_profiles")
    op.drop_index("ix_users_personal_trainer_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
