"""Pydantic schemas for the request log API."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from submanager.core.schemas import APIModel


class RequestLogRead(APIModel):
    id: int
    timestamp: datetime
    method: str
    path: str
    status_code: int
    client_ip: Optional[str] = None
    request_body: Optional[str] = None
    response_body: Optional[str] = None
    processing_time: Optional[float] = None  # in milliseconds
    user_agent: Optional[str] = None
    hostname: Optional[str] = None
    application_id: Optional[str] = Field(default=None, title="Application ID")
