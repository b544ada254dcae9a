from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    service: str = "cargo-ops"
    status: str
    database: str
    timestamp: datetime
    environment: str
    version: str
