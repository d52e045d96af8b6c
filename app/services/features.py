import logging
from typing import List

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.airline import Airline
from app.models.feature import Feature
from app.models.implementation import Implementation
from app.schemas.feature import (
    Feature as FeatureSchema,
    FeatureCreate,
    FeatureUpdate,
    FeatureImplementation,
    FeatureWithImplementations,
)
from app.services.errors import ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)


class FeatureService:
    """Service for feature operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_all_features(self) -> List[Feature]:
        """Get all features ordered by category, then name"""
        try:
            return self.db.query(Feature).order_by(Feature.category, Feature.name).all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch features: {str(e)}")

    def get_feature(self, feature_id: int) -> Feature:
        try:
            feature = self.db.query(Feature).filter(Feature.id == feature_id).first()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch feature: {str(e)}")

        if not feature:
            raise NotFoundError(f"Feature with ID {feature_id} not found")
        return feature

    def create_feature(self, feature_data: FeatureCreate) -> Feature:
        feature = Feature(**feature_data.model_dump(mode="json"))
        self.db.add(feature)
        self._commit(f"Failed to create feature '{feature_data.name}'")
        self.db.refresh(feature)

        logger.info(f"Created feature {feature.id} ({feature.name})")
        return feature

    def update_feature(self, feature_id: int, updates: FeatureUpdate) -> Feature:
        feature = self.get_feature(feature_id)

        changes = updates.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not changes:
            return feature

        for key, value in changes.items():
            setattr(feature, key, value)

        self._commit(f"Failed to update feature {feature_id}")
        self.db.refresh(feature)
        return feature

    def delete_feature(self, feature_id: int) -> None:
        feature = self.get_feature(feature_id)
        self.db.delete(feature)
        self._commit(f"Failed to delete feature {feature_id}")

        logger.info(f"Deleted feature {feature_id}")

    def get_feature_with_implementations(
        self, feature_id: int
    ) -> FeatureWithImplementations:
        """
        Get a feature with every airline's implementation of it, ordered by
        airline name.
        """
        feature = self.get_feature(feature_id)

        try:
            rows = (
                self.db.query(Implementation, Airline)
                .join(Airline, Implementation.airline_id == Airline.id)
                .filter(Implementation.feature_id == feature_id)
                .order_by(Airline.name)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to fetch feature with implementations: {str(e)}"
            )

        implementations = [
            FeatureImplementation(
                id=impl.id,
                airline_id=impl.airline_id,
                feature_id=impl.feature_id,
                value=impl.value,
                notes=impl.notes,
                airline_name=airline.name,
                airline_codes=airline.codes,
                airline_provider=airline.provider,
                airline_status=airline.status,
            )
            for impl, airline in rows
        ]

        return FeatureWithImplementations(
            **FeatureSchema.model_validate(feature).model_dump(),
            implementations=implementations,
        )

    def _commit(self, failure_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("A feature with this name already exists") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"{failure_message}: {str(e)}") from e
