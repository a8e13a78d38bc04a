# access_audit/infrastructure/database/models.py

from sqlalchemy import Boolean, Column, Index, Integer, String, Text

from access_audit.infrastructure.database.session import Base


class RequestAuditLog(Base):
    """ORM model for one gateway access decision. Rows are insert-only."""

    __tablename__ = "request_audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(Integer, nullable=False, index=True)
    org_id = Column(String, nullable=True)
    action = Column(Boolean, nullable=False)
    reason = Column(Integer, nullable=False)
    resource_id = Column(Integer, nullable=True, index=True)
    location = Column(String, nullable=True)
    actor_type = Column(String, nullable=True)
    actor = Column(String, nullable=True)
    actor_id = Column(String, nullable=True)
    auth_type = Column(String, nullable=True)
    metadata_ = Column("metadata", Text, nullable=True)
    original_request_url = Column(Text, nullable=False)
    scheme = Column(String, nullable=False)
    host = Column(String, nullable=False)
    path = Column(Text, nullable=False)
    method = Column(String, nullable=False)
    tls = Column(Boolean, nullable=False)
    ip = Column(String, nullable=True)

    __table_args__ = (
        Index("ix_request_audit_log_org_timestamp", "org_id", "timestamp"),
    )
