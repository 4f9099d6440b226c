"""initial_schema

Create the identity directory schema:
- Users (account state, profile, custom avatar)
- User custom fields (legacy lookups such as "<provider>_user_id")
- Associations (external identity -> user, with metadata snapshots)

Revision ID: 3c1f9a0d2b7e
Revises:
Create Date: 2026-10-18 09:12:44.518203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f9a0d2b7e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("state", sa.String(20), nullable=False, server_default="active"),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "state IN ('staged', 'pending', 'active')", name="ck_users_state"
        ),
    )
    op.create_index("idx_users_email", "users", ["email"])
    op.create_index(
        "idx_users_email_normalized",
        "users",
        [sa.text("lower(trim(email))")],
    )

    # ========================================================================
    # USER_CUSTOM_FIELDS table
    # ========================================================================
    op.create_table(
        "user_custom_fields",
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "name", name="pk_user_custom_fields"),
    )
    op.create_index(
        "idx_user_custom_fields_name_value",
        "user_custom_fields",
        ["name", "value"],
    )

    # ========================================================================
    # ASSOCIATIONS table
    # ========================================================================
    op.create_table(
        "associations",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("provider_uid", sa.String(255), nullable=False),  # OIDC subject
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column(
            "info",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "credentials",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "extra",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("last_used", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "provider", "provider_uid", name="uq_association_external_identity"
        ),
        sa.UniqueConstraint(
            "provider", "user_id", name="uq_association_user_provider"
        ),
    )
    op.create_index("idx_associations_user_id", "associations", ["user_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_associations_user_id", table_name="associations")
    op.drop_table("associations")

    op.drop_index(
        "idx_user_custom_fields_name_value", table_name="user_custom_fields"
    )
    op.drop_table("user_custom_fields")

    op.drop_index("idx_users_email_normalized", table_name="users")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")
