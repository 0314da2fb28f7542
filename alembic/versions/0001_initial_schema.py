"""Initial EventFlow schema."""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create base tables and enums."""
    bind = op.get_bind()

    eventstatus = postgresql.ENUM(
        "draft",
        "planning",
        "inviting",
        "gathering_preferences",
        "ai_recommending",
        "voting",
        "confirmed",
        "completed",
        "cancelled",
        name="eventstatus",
        create_type=False,
    )
    invitationstatus = postgresql.ENUM(
        "pending",
        "accepted",
        "declined",
        name="invitationstatus",
        create_type=False,
    )
    verificationstatus = postgresql.ENUM(
        "pending",
        "approved",
        "rejected",
        name="verificationstatus",
        create_type=False,
    )

    eventstatus.create(bind, checkfirst=True)
    invitationstatus.create(bind, checkfirst=True)
    verificationstatus.create(bind, checkfirst=True)

    op.create_table(
        "events",
        sa.Column("event_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("organizer_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column("status", eventstatus, nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_time", sa.Time(), nullable=False),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("expected_attendees", sa.Integer(), nullable=False),
        sa.Column("budget_total", sa.Numeric(12, 2), nullable=True),
        sa.Column("acceptance_threshold", sa.Numeric(5, 4), nullable=True),
        sa.Column("rsvp_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("voting_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ai_analysis_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_events_status", "events", ["status"])
    op.create_index("idx_events_organizer_date", "events", ["organizer_id", "scheduled_date"])

    op.create_table(
        "event_participants",
        sa.Column(
            "event_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("invitation_status", invitationstatus, nullable=False),
        sa.Column("invited_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "idx_participants_event_status",
        "event_participants",
        ["event_id", "invitation_status"],
    )

    op.create_table(
        "user_preferences",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("cuisine_preferences", sa.Text(), nullable=True),
        sa.Column("budget_preference", sa.Numeric(10, 2), nullable=True),
        sa.Column("distance_radius", sa.Float(), nullable=True),
        sa.Column("dietary_restrictions", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_locations",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "venues",
        sa.Column("venue_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("price_level", sa.Numeric(10, 2), nullable=True),
        sa.Column("average_rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_status", verificationstatus, nullable=False),
    )
    op.create_index(
        "idx_venues_listable",
        "venues",
        ["is_deleted", "verification_status", "category"],
    )
    op.create_index("idx_venues_rating", "venues", ["average_rating"])

    op.create_table(
        "event_place_options",
        sa.Column("option_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "event_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "venue_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("venues.venue_id"),
            nullable=False,
        ),
        sa.Column("suggested_by", sa.String(length=50), nullable=False),
        sa.Column("ai_score", sa.Float(), nullable=False),
        sa.Column("ai_reasoning", sa.Text(), nullable=False),
        sa.Column("pros", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("cons", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("estimated_cost_per_person", sa.Numeric(10, 2), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "event_id", "venue_id", "added_at", name="uq_option_event_venue_run"
        ),
    )
    op.create_index("idx_options_event", "event_place_options", ["event_id", "ai_score"])

    op.create_table(
        "event_audit_logs",
        sa.Column("audit_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "event_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("old_status", sa.String(length=50), nullable=False),
        sa.Column("new_status", sa.String(length=50), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "additional_data",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
    )
    op.create_index("idx_audit_event", "event_audit_logs", ["event_id", "changed_at"])


def downgrade() -> None:
    """Drop base tables and enums."""
    op.drop_index("idx_audit_event", table_name="event_audit_logs")
    op.drop_table("event_audit_logs")

    op.drop_index("idx_options_event", table_name="event_place_options")
    op.drop_table("event_place_options")

    op.drop_index("idx_venues_rating", table_name="venues")
    op.drop_index("idx_venues_listable", table_name="venues")
    op.drop_table("venues")

    op.drop_table("user_locations")
    op.drop_table("user_preferences")

    op.drop_index("idx_participants_event_status", table_name="event_participants")
    op.drop_table("event_participants")

    op.drop_index("idx_events_organizer_date", table_name="events")
    op.drop_index("idx_events_status", table_name="events")
    op.drop_table("events")

    bind = op.get_bind()
    sa.Enum(name="verificationstatus").drop(bind, checkfirst=True)
    sa.Enum(name="invitationstatus").drop(bind, checkfirst=True)
    sa.Enum(name="eventstatus").drop(bind, checkfirst=True)
