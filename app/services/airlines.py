import logging
from typing import List

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.airline import Airline
from app.models.feature import Feature
from app.models.implementation import Implementation
from app.schemas.airline import (
    Airline as AirlineSchema,
    AirlineCreate,
    AirlineUpdate,
    AirlineImplementation,
    AirlineWithImplementations,
)
from app.services.errors import ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)


class AirlineService:
    """Service for airline operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_all_airlines(self) -> List[Airline]:
        """
        Get all airlines ordered by name

        Raises:
            DatabaseError: When the query fails
        """
        try:
            return self.db.query(Airline).order_by(Airline.name).all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch airlines: {str(e)}")

    def get_airline(self, airline_id: int) -> Airline:
        """
        Get a single airline

        Raises:
            NotFoundError: When no airline has this id
            DatabaseError: When the query fails
        """
        try:
            airline = self.db.query(Airline).filter(Airline.id == airline_id).first()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to fetch airline: {str(e)}")

        if not airline:
            raise NotFoundError(f"Airline with ID {airline_id} not found")
        return airline

    def create_airline(self, airline_data: AirlineCreate) -> Airline:
        airline = Airline(**airline_data.model_dump(mode="json"))
        self.db.add(airline)
        self._commit(f"Failed to create airline '{airline_data.name}'")
        self.db.refresh(airline)

        logger.info(f"Created airline {airline.id} ({airline.name})")
        return airline

    def update_airline(self, airline_id: int, updates: AirlineUpdate) -> Airline:
        """
        Apply a partial update. Fields left out of the payload are not touched.
        """
        airline = self.get_airline(airline_id)

        changes = updates.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not changes:
            return airline

        for key, value in changes.items():
            setattr(airline, key, value)

        self._commit(f"Failed to update airline {airline_id}")
        self.db.refresh(airline)
        return airline

    def delete_airline(self, airline_id: int) -> None:
        """Delete an airline and, through the ORM cascade, its implementations"""
        airline = self.get_airline(airline_id)
        self.db.delete(airline)
        self._commit(f"Failed to delete airline {airline_id}")

        logger.info(f"Deleted airline {airline_id}")

    def get_airline_with_implementations(
        self, airline_id: int
    ) -> AirlineWithImplementations:
        """
        Get an airline together with all of its implementations, each joined
        with its feature details. Ordered by feature category, then name.
        """
        airline = self.get_airline(airline_id)

        try:
            rows = (
                self.db.query(Implementation, Feature)
                .join(Feature, Implementation.feature_id == Feature.id)
                .filter(Implementation.airline_id == airline_id)
                .order_by(Feature.category, Feature.name)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to fetch airline with implementations: {str(e)}"
            )

        implementations = [
            AirlineImplementation(
                id=impl.id,
                airline_id=impl.airline_id,
                feature_id=impl.feature_id,
                value=impl.value,
                notes=impl.notes,
                feature_name=feature.name,
                feature_category=feature.category,
                feature_description=feature.description,
            )
            for impl, feature in rows
        ]

        return AirlineWithImplementations(
            **AirlineSchema.model_validate(airline).model_dump(),
            implementations=implementations,
        )

    def _commit(self, failure_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("An airline with this name already exists") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"{failure_message}: {str(e)}") from e
