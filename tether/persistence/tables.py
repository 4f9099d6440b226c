"""SQLAlchemy table definitions for Tether.

These table definitions match the schema defined in Alembic migrations.
Column types are the generic SQLAlchemy ones (with PostgreSQL variants where
it matters) so the same tables also run on SQLite.
"""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects import postgresql

# Metadata object for all tables
metadata = MetaData()

JSONType = JSON().with_variant(postgresql.JSONB(), "postgresql")

# Constraint names, used to tell uniqueness violations apart
UQ_ASSOCIATION_EXTERNAL_IDENTITY = "uq_association_external_identity"
UQ_ASSOCIATION_USER_PROVIDER = "uq_association_user_provider"

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("email", String(255), nullable=True),  # Stored normalized
    Column("name", String(255), nullable=True),  # Display name
    Column("state", String(20), nullable=False, server_default="active"),
    Column("avatar_url", Text, nullable=True),  # Custom avatar only
    Column("bio", Text, nullable=True),
    Column("location", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

Index("idx_users_email", users_table.c.email)

# ============================================================================
# USER CUSTOM FIELDS TABLE (legacy lookups, e.g. "<provider>_user_id")
# ============================================================================
user_custom_fields_table = Table(
    "user_custom_fields",
    metadata,
    Column(
        "user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    ),
    Column("name", String(255), nullable=False),
    Column("value", Text, nullable=False),
    PrimaryKeyConstraint("user_id", "name", name="pk_user_custom_fields"),
)

Index(
    "idx_user_custom_fields_name_value",
    user_custom_fields_table.c.name,
    user_custom_fields_table.c.value,
)

# ============================================================================
# ASSOCIATIONS TABLE (external identity -> user)
# ============================================================================
associations_table = Table(
    "associations",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("provider", String(50), nullable=False),
    Column("provider_uid", String(255), nullable=False),  # OIDC subject
    Column(
        "user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    ),
    Column("info", JSONType, nullable=False),  # email, name, picture
    Column("credentials", JSONType, nullable=False),
    Column("extra", JSONType, nullable=False),  # email_verified, link_provenance
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Column("last_used", DateTime(timezone=True), nullable=True),
    UniqueConstraint(
        "provider", "provider_uid", name=UQ_ASSOCIATION_EXTERNAL_IDENTITY
    ),
    UniqueConstraint("provider", "user_id", name=UQ_ASSOCIATION_USER_PROVIDER),
)

Index("idx_associations_user_id", associations_table.c.user_id)
