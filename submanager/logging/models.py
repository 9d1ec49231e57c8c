"""Database models for the request log."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from submanager.core.database import Base


class RequestLog(Base):
    """One API request and its outcome."""

    __tablename__ = "request_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=datetime.now, index=True)
    method = Column(String(10), nullable=False)
    path = Column(String(1024), nullable=False)
    status_code = Column(Integer, nullable=False, index=True)
    client_ip = Column(String(64), nullable=True)
    request_body = Column(Text, nullable=True)
    response_body = Column(Text, nullable=True)
    processing_time = Column(Float, nullable=True)  # milliseconds
    user_agent = Column(String(512), nullable=True)
    hostname = Column(String(255), nullable=True)
    application_id = Column(String(255), nullable=True)
