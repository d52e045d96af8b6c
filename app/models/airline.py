from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.database import Base
from app.models.enums import AIRLINE_STATUS_SQL


class Airline(Base):
    __tablename__ = "airlines"
    __table_args__ = (
        CheckConstraint(f"status IN ({AIRLINE_STATUS_SQL})", name="ck_airlines_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    codes = Column(String(100), nullable=False, index=True)  # "LH, OS, SN"
    provider = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, index=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    implementations = relationship(
        "Implementation", back_populates="airline", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Airline(id={self.id}, codes='{self.codes}', name='{self.name}')>"
