from sqlalchemy import Column, Integer, String, DateTime, Text, Float
from datetime import datetime, timezone
from app.database import Base


class AuditLog(Base):
    __tablename__ = "audits"

    id = Column(Integer, primary_key=True, index=True)

    method = Column(String(10), nullable=False, index=True)
    path = Column(String(500), nullable=False, index=True)
    query_params = Column(Text, nullable=True)

    status_code = Column(Integer, nullable=False, index=True)
    response_time_ms = Column(Float, nullable=False)

    client_ip = Column(String(50), nullable=True)
    user_agent = Column(String(500), nullable=True)

    timestamp = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False, index=True
    )

    error_detail = Column(Text, nullable=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, {self.method} {self.path}, status={self.status_code}, time={self.response_time_ms}ms)>"
