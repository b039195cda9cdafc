"""SQLAlchemy table definitions for gitswitch.

Session state is a handful of preference values, so a single key/value
table holds all of it.
"""

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, func

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# PREFERENCES TABLE
# ============================================================================
preferences_table = Table(
    "preferences",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("value", Text, nullable=True),  # NULL means "unset"
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
)

# Preference keys
IDENTITIES_KEY = "identities"
ACTIVE_IDENTITY_KEY = "active_identity_id"
CLIENT_ID_KEY = "device_flow_client_id"
