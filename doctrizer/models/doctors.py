"""Doctor model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID

metadata = MetaData()

doctors = Table(
    "doctors",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")),
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    ),
    # Practice
    Column("specialty", String(200), index=True),
    Column("bio", Text),
    Column("location", Text),
    Column("years_experience", Integer),
    Column("consultation_fee", Numeric(10, 2)),
    Column("avatar_url", Text),
    Column("offers_video_consult", Boolean, nullable=False, server_default=text("true")),
    # Ratings (display only)
    Column("rating", Numeric(3, 2)),
    Column("review_count", Integer, nullable=False, server_default=text("0")),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
)
