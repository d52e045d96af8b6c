import logging
from typing import List, Optional

import pandas as pd
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.airline import Airline
from app.models.feature import Feature
from app.models.implementation import Implementation
from app.schemas.feature import Feature as FeatureSchema
from app.schemas.implementation import (
    ImplementationCreate,
    ImplementationUpdate,
    ImplementationMatrix,
    MatrixRow,
)
from app.services.errors import ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)


class ImplementationService:
    """Service for airline/feature implementation records"""

    def __init__(self, db: Session):
        self.db = db

    def get_all_implementations(self) -> List[Implementation]:
        """Get all implementations ordered by airline id, then feature id"""
        try:
            return (
                self.db.query(Implementation)
                .order_by(Implementation.airline_id, Implementation.feature_id)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch implementations: {str(e)}")

    def get_implementation(self, implementation_id: int) -> Implementation:
        try:
            implementation = (
                self.db.query(Implementation)
                .filter(Implementation.id == implementation_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch implementation: {str(e)}")

        if not implementation:
            raise NotFoundError(f"Implementation with ID {implementation_id} not found")
        return implementation

    def find_implementation(
        self, airline_id: int, feature_id: int
    ) -> Optional[Implementation]:
        """Look up the implementation for an airline/feature pair, None if absent"""
        try:
            return (
                self.db.query(Implementation)
                .filter(
                    Implementation.airline_id == airline_id,
                    Implementation.feature_id == feature_id,
                )
                .first()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch implementation: {str(e)}")

    def get_implementation_by_pair(self, airline_id: int, feature_id: int) -> Implementation:
        implementation = self.find_implementation(airline_id, feature_id)
        if not implementation:
            raise NotFoundError(
                f"Implementation for airline {airline_id} and feature {feature_id} not found"
            )
        return implementation

    def create_implementation(self, data: ImplementationCreate) -> Implementation:
        """
        Create an implementation for an existing airline and feature.

        Raises:
            NotFoundError: When the airline or the feature does not exist
            ConflictError: When the pair already has an implementation
        """
        self._ensure_exists(Airline, data.airline_id, "Airline")
        self._ensure_exists(Feature, data.feature_id, "Feature")

        if self.find_implementation(data.airline_id, data.feature_id):
            raise ConflictError(
                f"Implementation for airline {data.airline_id} and feature {data.feature_id} already exists"
            )

        implementation = Implementation(**data.model_dump())
        self.db.add(implementation)
        self._commit("Failed to create implementation")
        self.db.refresh(implementation)
        return implementation

    def update_implementation(
        self, airline_id: int, feature_id: int, updates: ImplementationUpdate
    ) -> Implementation:
        implementation = self.get_implementation_by_pair(airline_id, feature_id)

        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return implementation

        for key, value in changes.items():
            setattr(implementation, key, value)

        self._commit("Failed to update implementation")
        self.db.refresh(implementation)
        return implementation

    def delete_implementation(self, airline_id: int, feature_id: int) -> None:
        implementation = self.get_implementation_by_pair(airline_id, feature_id)
        self.db.delete(implementation)
        self._commit("Failed to delete implementation")

    def get_matrix(self) -> ImplementationMatrix:
        """
        Build the airline x feature grid.

        Rows follow airline name order, columns follow feature category/name
        order. Pairs without an implementation are null.
        """
        try:
            airlines = self.db.query(Airline).order_by(Airline.name).all()
            features = (
                self.db.query(Feature).order_by(Feature.category, Feature.name).all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch matrix data: {str(e)}")
        implementations = self.get_all_implementations()

        airline_ids = [a.id for a in airlines]
        feature_ids = [f.id for f in features]

        frame = pd.DataFrame(
            [
                {"airline_id": i.airline_id, "feature_id": i.feature_id, "value": i.value}
                for i in implementations
            ],
            columns=["airline_id", "feature_id", "value"],
        )

        if frame.empty:
            grid = pd.DataFrame(index=airline_ids, columns=feature_ids, dtype=object)
        else:
            grid = frame.pivot(
                index="airline_id", columns="feature_id", values="value"
            ).reindex(index=airline_ids, columns=feature_ids)

        rows = []
        for airline in airlines:
            cells = {}
            for feature_id in feature_ids:
                value = grid.at[airline.id, feature_id]
                cells[feature_id] = value if pd.notna(value) else None

            rows.append(
                MatrixRow(
                    airline_id=airline.id,
                    airline_name=airline.name,
                    airline_codes=airline.codes,
                    cells=cells,
                )
            )

        return ImplementationMatrix(
            features=[FeatureSchema.model_validate(f) for f in features],
            rows=rows,
            total_airlines=len(airlines),
            total_features=len(features),
            total_implementations=len(implementations),
        )

    def _ensure_exists(self, model, record_id: int, label: str) -> None:
        try:
            exists = self.db.query(model.id).filter(model.id == record_id).first()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch {label.lower()}: {str(e)}")

        if not exists:
            raise NotFoundError(f"{label} with ID {record_id} not found")

    def _commit(self, failure_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(
                "An implementation for this airline and feature already exists"
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"{failure_message}: {str(e)}") from e
