from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.database import Base
from app.models.enums import FEATURE_CATEGORY_SQL


class Feature(Base):
    __tablename__ = "features"
    __table_args__ = (
        CheckConstraint(f"category IN ({FEATURE_CATEGORY_SQL})", name="ck_features_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(20), nullable=False, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    implementations = relationship(
        "Implementation", back_populates="feature", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Feature(id={self.id}, category='{self.category}', name='{self.name}')>"
