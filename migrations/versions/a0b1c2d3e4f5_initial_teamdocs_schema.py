"""Initial teamdocs schema: teams, users, collections, documents, stars, attachments, events.

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "a0b1c2d3e4f5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    # teams.default_collection_id gets its FK after collections exists.
    op.create_table(
        "teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("subdomain", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(4096), nullable=True),
        sa.Column("sharing", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("guest_signin", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("document_embeds", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("member_collection_create", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("invite_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("default_user_role", sa.String(16), nullable=False, server_default="member"),
        sa.Column("default_collection_id", sa.String(36), nullable=True),
        sa.Column("preferences", JSONType, nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("subdomain"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("avatar_url", sa.String(4096), nullable=True),
        sa.Column("color", sa.String(16), nullable=True),
        sa.Column("language", sa.String(16), nullable=False, server_default="en_US"),
        sa.Column("role", sa.String(16), nullable=False, server_default="member"),
        sa.Column("preferences", JSONType, nullable=True),
        sa.Column("notification_settings", JSONType, nullable=True),
        sa.Column("token_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_active_at", sa.DateTime(), nullable=True),
        sa.Column("last_active_ip", sa.String(64), nullable=True),
        sa.Column("suspended_at", sa.DateTime(), nullable=True),
        sa.Column("suspended_by_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("team_id", "email", name="uq_user_team_email"),
    )
    op.create_index("idx_users_team_id", "users", ["team_id"])

    op.create_table(
        "team_domains",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_by_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("team_id", "name", name="uq_team_domain_name"),
    )

    op.create_table(
        "collections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(16), nullable=True),
        sa.Column("icon", sa.String(64), nullable=True),
        sa.Column("permission", sa.String(16), nullable=True),
        sa.Column("sharing", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("index", sa.String(256), nullable=True),
        sa.Column("created_by_id", sa.String(36), nullable=True),
        sa.Column("deleted_by_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["deleted_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_collections_team_id", "collections", ["team_id"])

    with op.batch_alter_table("teams") as batch:
        batch.create_foreign_key(
            "fk_teams_default_collection_id",
            "collections",
            ["default_collection_id"],
            ["id"],
            ondelete="SET NULL",
        )

    op.create_table(
        "collection_users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("collection_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("permission", sa.String(16), nullable=False, server_default="read_write"),
        sa.Column("created_by_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("collection_id", "user_id", name="uq_collection_user"),
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(36), nullable=False),
        sa.Column("collection_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("text", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_by_id", sa.String(36), nullable=True),
        sa.Column("last_modified_by_id", sa.String(36), nullable=True),
        sa.Column("deleted_by_id", sa.String(36), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["last_modified_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["deleted_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_documents_team_id", "documents", ["team_id"])
    op.create_index("idx_documents_collection_id", "documents", ["collection_id"])

    op.create_table(
        "stars",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("document_id", sa.String(36), nullable=True),
        sa.Column("collection_id", sa.String(36), nullable=True),
        sa.Column("index", sa.String(256), nullable=True),
        sa.Column("created_by_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_stars_user_id", "stars", ["user_id"])

    op.create_table(
        "attachments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("document_id", sa.String(36), nullable=True),
        sa.Column("key", sa.String(4096), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(255), nullable=False, server_default="application/octet-stream"),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sha256", sa.String(64), nullable=False),
        sa.Column("acl", sa.String(32), nullable=False, server_default="private"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("key"),
    )
    op.create_index("idx_attachments_team_id", "attachments", ["team_id"])
    op.create_index("idx_attachments_document_id", "attachments", ["document_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("model_id", sa.String(64), nullable=True),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("team_id", sa.String(36), nullable=True),
        sa.Column("collection_id", sa.String(36), nullable=True),
        sa.Column("document_id", sa.String(36), nullable=True),
        sa.Column("ip", sa.String(64), nullable=True),
        sa.Column("data", JSONType, nullable=True),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_events_team_id_created_at", "events", ["team_id", "created_at"])
    op.create_index("idx_events_name", "events", ["name"])


def downgrade() -> None:
    op.drop_index("idx_events_name", table_name="events")
    op.drop_index("idx_events_team_id_created_at", table_name="events")
    op.drop_table("events")
    op.drop_index("idx_attachments_document_id", table_name="attachments")
    op.drop_index("idx_attachments_team_id", table_name="attachments")
    op.drop_table("attachments")
    op.drop_index("idx_stars_user_id", table_name="stars")
    op.drop_table("stars")
    op.drop_index("idx_documents_collection_id", table_name="documents")
    op.drop_index("idx_documents_team_id", table_name="documents")
    op.drop_table("documents")
    op.drop_table("collection_users")
    with op.batch_alter_table("teams") as batch:
        batch.drop_constraint("fk_teams_default_collection_id", type_="foreignkey")
    op.drop_index("idx_collections_team_id", table_name="collections")
    op.drop_table("collections")
    op.drop_table("team_domains")
    op.drop_index("idx_users_team_id", table_name="users")
    op.drop_table("users")
    op.drop_table("teams")
