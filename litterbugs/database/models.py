"""
SQLAlchemy models for the self-hosted Litterbugs store
"""

from datetime import datetime

from sqlalchemy import (
    Column, Float, String, Text, DateTime, LargeBinary, JSON, Index
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ReportRow(Base):
    """
    Litter report row.

    Timestamps are stored as naive UTC.
    """
    __tablename__ = "reports"

    id = Column(String(32), primary_key=True)

    title = Column(String(200), nullable=False)
    litter_types = Column(JSON)
    types = Column(Text)
    notes_presets = Column(JSON)
    notes_other = Column(Text)
    severity = Column(String(10))

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    user_id = Column(String(64), index=True)
    photo_paths = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_report_expires_at", expires_at),
    )

    def __repr__(self):
        return f"<ReportRow({self.id}, lat={self.latitude}, lon={self.longitude})>"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "litter_types": self.litter_types,
            "types": self.types,
            "notes_presets": self.notes_presets,
            "notes_other": self.notes_other,
            "severity": self.severity,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "user_id": self.user_id,
            "photo_paths": list(self.photo_paths or []),
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }


class StoredPhoto(Base):
    """Photo bytes keyed by storage path."""
    __tablename__ = "report_photos"

    path = Column(String(500), primary_key=True)
    content_type = Column(String(50), nullable=False)
    data = Column(LargeBinary, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<StoredPhoto({self.path}, {len(self.data or b'')} bytes)>"
