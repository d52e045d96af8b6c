from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.database import Base


class Implementation(Base):
    __tablename__ = "implementations"
    __table_args__ = (
        UniqueConstraint("airline_id", "feature_id", name="uq_implementation_airline_feature"),
    )

    id = Column(Integer, primary_key=True, index=True)

    airline_id = Column(
        Integer, ForeignKey("airlines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    feature_id = Column(
        Integer, ForeignKey("features.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Free text: "Yes", "No", "Limited", "Pilot", ...
    value = Column(String(255), nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    airline = relationship("Airline", back_populates="implementations")
    feature = relationship("Feature", back_populates="implementations")

    def __repr__(self):
        return f"<Implementation(id={self.id}, airline={self.airline_id}, feature={self.feature_id}, value='{self.value}')>"
