"""Create the users, projects, notifications and calendar tables

Create Date: 2026-02-02 09:00:00.000000
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pytest_alembic import MigrationContext
import sqlalchemy as sa
from alembic import op

from framehouse.types.sqlalchemy import TZDateTime, WallClockDateTime

# revision identifiers, used by Alembic.
revision: str = "4f1c2d8a9b3e"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

user_role_enum = sa.Enum("admin", "client", name="userrole")
project_status_enum = sa.Enum(
    "inquiry",
    "quote_sent",
    "contract_signed",
    "scheduled",
    "in_progress",
    "editing",
    "review",
    "delivered",
    "completed",
    "cancelled",
    name="projectstatus",
)
notification_type_enum = sa.Enum(
    "slot_booked",
    "event_created",
    "event_updated",
    "event_cancelled",
    name="notificationtype",
)
calendar_event_type_enum = sa.Enum(
    "filming",
    "consultation",
    "meeting",
    "editing",
    "delivery",
    "other",
    "blocked",
    name="calendareventtype",
)


def upgrade() -> None:
    op.create_table(
        "core_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_on", TZDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_core_user_id"), "core_user", ["id"], unique=False)
    op.create_index(op.f("ix_core_user_email"), "core_user", ["email"], unique=True)

    op.create_table(
        "project",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("created_on", TZDateTime(), nullable=False),
        sa.Column("status", project_status_enum, nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["core_user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_project_client_id"),
        "project",
        ["client_id"],
        unique=False,
    )

    op.create_table(
        "notification",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("type", notification_type_enum, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("link", sa.String(), nullable=True),
        sa.Column("created_on", TZDateTime(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["core_user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_notification_user_id"),
        "notification",
        ["user_id"],
        unique=False,
    )

    op.create_table(
        "calendar_event",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("start_at", WallClockDateTime(), nullable=False),
        sa.Column("end_at", WallClockDateTime(), nullable=False),
        sa.Column("created_at", TZDateTime(), nullable=False),
        sa.Column("updated_at", TZDateTime(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=True),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("event_type", calendar_event_type_enum, nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("all_day", sa.Boolean(), nullable=False),
        sa.Column("is_available_slot", sa.Boolean(), nullable=False),
        sa.Column("is_booked", sa.Boolean(), nullable=False),
        sa.Column("booked_by", sa.String(), nullable=True),
        sa.Column("color", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["booked_by"], ["core_user.id"]),
        sa.ForeignKeyConstraint(["client_id"], ["core_user.id"]),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_calendar_event_start_at"),
        "calendar_event",
        ["start_at"],
        unique=False,
    )
    op.create_index(
        op.f("ix_calendar_event_is_available_slot"),
        "calendar_event",
        ["is_available_slot"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(
        op.f("ix_calendar_event_is_available_slot"),
        table_name="calendar_event",
    )
    op.drop_index(op.f("ix_calendar_event_start_at"), table_name="calendar_event")
    op.drop_table("calendar_event")
    op.drop_index(op.f("ix_notification_user_id"), table_name="notification")
    op.drop_table("notification")
    op.drop_index(op.f("ix_project_client_id"), table_name="project")
    op.drop_table("project")
    op.drop_index(op.f("ix_core_user_email"), table_name="core_user")
    op.drop_index(op.f("ix_core_user_id"), table_name="core_user")
    op.drop_table("core_user")

    # Enum types are only created as types by PostgreSQL
    calendar_event_type_enum.drop(op.get_bind(), checkfirst=True)
    notification_type_enum.drop(op.get_bind(), checkfirst=True)
    project_status_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)


def pre_test_upgrade(
    alembic_runner: "MigrationContext",
    alembic_connection: sa.Connection,
) -> None:
    pass


def test_upgrade(
    alembic_runner: "MigrationContext",
    alembic_connection: sa.Connection,
) -> None:
    inspector = sa.inspect(alembic_connection)
    tables = set(inspector.get_table_names())
    assert {"core_user", "project", "notification", "calendar_event"} <= tables

    index_names = {
        index["name"] for index in inspector.get_indexes("calendar_event")
    }
    assert "ix_calendar_event_start_at" in index_names
    assert "ix_calendar_event_is_available_slot" in index_names
