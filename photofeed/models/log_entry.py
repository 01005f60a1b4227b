"""
Application log entries persisted by the database log sink
"""
import uuid

from sqlalchemy import Column, String, Text, DateTime, JSON, Uuid

from photofeed.core.database import Base, utcnow


class LogEntry(Base):
    """Append-only log row"""

    __tablename__ = "logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    level = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    log_metadata = Column("metadata", JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<LogEntry(level={self.level}, message={self.message[:40]!r})>"
