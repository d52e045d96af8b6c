from typing import List, Protocol

from sqlalchemy.orm import Session

from app.schemas.airline import Airline
from app.schemas.feature import Feature
from app.schemas.implementation import Implementation
from app.services.airlines import AirlineService
from app.services.features import FeatureService
from app.services.implementations import ImplementationService


class DomainStore(Protocol):
    """Read side of the airline/feature/implementation store"""

    def get_all_airlines(self) -> List[Airline]: ...

    def get_all_features(self) -> List[Feature]: ...

    def get_all_implementations(self) -> List[Implementation]: ...


class SqlDomainStore:
    """
    DomainStore backed by the SQL services. Returns detached schema objects
    so callers never hold on to session-bound rows.
    """

    def __init__(self, db: Session):
        self.airline_service = AirlineService(db)
        self.feature_service = FeatureService(db)
        self.implementation_service = ImplementationService(db)

    def get_all_airlines(self) -> List[Airline]:
        return [
            Airline.model_validate(a) for a in self.airline_service.get_all_airlines()
        ]

    def get_all_features(self) -> List[Feature]:
        return [
            Feature.model_validate(f) for f in self.feature_service.get_all_features()
        ]

    def get_all_implementations(self) -> List[Implementation]:
        return [
            Implementation.model_validate(i)
            for i in self.implementation_service.get_all_implementations()
        ]
