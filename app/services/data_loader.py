import logging
from typing import Any, Dict, List, Optional, Tuple, Union, IO

import pandas as pd
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.models.airline import Airline
from app.models.feature import Feature
from app.models.implementation import Implementation
from app.models.enums import AirlineStatus, FeatureCategory
from app.database import SessionLocal

logger = logging.getLogger(__name__)

CsvSource = Union[str, IO[str]]

SAMPLE_AIRLINES = [
    {"name": "American Airlines", "codes": "AA", "provider": "Sabre", "status": "Production"},
    {"name": "Lufthansa Group", "codes": "LH, OS, SN, LX, EN, 4Y", "provider": "Altea NDC", "status": "Production"},
    {"name": "Delta Air Lines", "codes": "DL", "provider": "Accelya (Former Farelogix)", "status": "Production"},
    {"name": "United Airlines", "codes": "UA", "provider": "Sabre", "status": "Pilot"},
    {"name": "British Airways", "codes": "BA", "provider": "Amadeus", "status": "Production"},
]

SAMPLE_FEATURES = [
    {"category": "Shopping", "name": "Dynamic pricing", "description": "Real-time pricing based on demand and availability"},
    {"category": "Shopping", "name": "Seat selection", "description": "Ability to select specific seats during booking"},
    {"category": "Shopping", "name": "Baggage options", "description": "Selection of different baggage allowances"},
    {"category": "Global", "name": "Unaccompanied minors", "description": "Support for unaccompanied minor bookings"},
    {"category": "Global", "name": "Pet transportation", "description": "Options for pet travel arrangements"},
    {"category": "Booking", "name": "Multi-passenger booking", "description": "Booking for multiple passengers in one transaction"},
    {"category": "Booking", "name": "Group bookings", "description": "Special rates and options for group travel"},
    {"category": "Servicing", "name": "Online check-in", "description": "Web-based check-in functionality"},
    {"category": "Payment", "name": "Corporate payment", "description": "Corporate billing and payment options"},
]

# (airline name, feature name, value, notes)
SAMPLE_IMPLEMENTATIONS = [
    ("American Airlines", "Dynamic pricing", "Yes", "Full dynamic pricing support"),
    ("American Airlines", "Seat selection", "Yes", "Standard seat selection available"),
    ("American Airlines", "Baggage options", "Yes", "Multiple baggage tiers"),
    ("American Airlines", "Unaccompanied minors", "Yes", "Unaccompanied minor service available"),
    ("American Airlines", "Pet transportation", "No", "Pet transport not supported via NDC"),
    ("Lufthansa Group", "Dynamic pricing", "Yes", "Advanced pricing algorithms"),
    ("Lufthansa Group", "Seat selection", "Yes", "Premium seat selection"),
    ("Lufthansa Group", "Baggage options", "Yes", "Flexible baggage options"),
    ("Lufthansa Group", "Unaccompanied minors", "Limited", "Select routes only"),
    ("Lufthansa Group", "Pet transportation", "Yes", "Full pet transport support"),
    ("Delta Air Lines", "Dynamic pricing", "Yes", "Market-leading dynamic pricing"),
    ("Delta Air Lines", "Seat selection", "Yes", "Enhanced seat selection"),
    ("Delta Air Lines", "Baggage options", "Yes", "Comprehensive baggage options"),
    ("Delta Air Lines", "Unaccompanied minors", "Yes", "Full unaccompanied minor support"),
    ("Delta Air Lines", "Pet transportation", "Limited", "Domestic flights only"),
    ("United Airlines", "Dynamic pricing", "Pilot", "Testing phase"),
    ("United Airlines", "Seat selection", "Yes", "Basic seat selection"),
    ("United Airlines", "Baggage options", "No", "Not yet implemented"),
    ("United Airlines", "Unaccompanied minors", "No", "Under development"),
    ("United Airlines", "Pet transportation", "No", "Future roadmap item"),
    ("British Airways", "Dynamic pricing", "Yes", "Sophisticated pricing model"),
    ("British Airways", "Seat selection", "Yes", "Premium and standard seats"),
    ("British Airways", "Baggage options", "Yes", "Tiered baggage system"),
    ("British Airways", "Unaccompanied minors", "Yes", "Comprehensive UM service"),
    ("British Airways", "Pet transportation", "Yes", "Full pet travel support"),
]


def _clean(value: Any) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _read_csv(source: CsvSource) -> pd.DataFrame:
    # Everything as text: "None" or "NA" are legitimate implementation values
    return pd.read_csv(source, dtype=str, keep_default_na=False, na_values=[""])


class DataLoader:
    """Service for loading seed data and CSV files"""

    def __init__(self, db: Optional[Session] = None):
        self._owns_session = db is None
        self.db = db or SessionLocal()

    def close(self):
        if self._owns_session:
            self.db.close()

    def seed_sample_data(self) -> bool:
        """
        Insert the sample airlines, features and implementations.
        Skipped when any airline already exists.

        Returns:
            True when the data was inserted
        """
        if self.db.query(Airline.id).first():
            logger.info("Database already contains data, skipping seed")
            return False

        try:
            airlines = {data["name"]: Airline(**data) for data in SAMPLE_AIRLINES}
            features = {data["name"]: Feature(**data) for data in SAMPLE_FEATURES}
            self.db.add_all(list(airlines.values()) + list(features.values()))
            self.db.flush()

            for airline_name, feature_name, value, notes in SAMPLE_IMPLEMENTATIONS:
                self.db.add(
                    Implementation(
                        airline_id=airlines[airline_name].id,
                        feature_id=features[feature_name].id,
                        value=value,
                        notes=notes,
                    )
                )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error seeding database")
            raise

        logger.info(
            f"Database seeded: {len(SAMPLE_AIRLINES)} airlines, "
            f"{len(SAMPLE_FEATURES)} features, "
            f"{len(SAMPLE_IMPLEMENTATIONS)} implementations"
        )
        return True

    def load_airlines_from_csv(self, source: CsvSource) -> Tuple[int, int, List[str]]:
        """
        Load airlines from CSV with columns id (optional), name, codes,
        provider, status. Existing rows are matched by id, else by name.
        """

        def parse(row) -> Dict[str, Any]:
            return {
                "name": _clean(row["name"]),
                "codes": _clean(row["codes"]),
                "provider": _clean(row["provider"]),
                "status": AirlineStatus(_clean(row["status"])).value,
            }

        return self._load_reference_rows(source, Airline, parse)

    def load_features_from_csv(self, source: CsvSource) -> Tuple[int, int, List[str]]:
        """
        Load features from CSV with columns id (optional), category, name,
        description.
        """

        def parse(row) -> Dict[str, Any]:
            return {
                "category": FeatureCategory(_clean(row["category"])).value,
                "name": _clean(row["name"]),
                "description": _clean(row.get("description")),
            }

        return self._load_reference_rows(source, Feature, parse)

    def load_implementations_from_csv(
        self, source: CsvSource
    ) -> Tuple[int, int, List[str]]:
        """
        Load implementations from CSV with columns airline_id, feature_id,
        value, notes. An existing airline/feature pair is updated in place.
        """
        created_count = 0
        updated_count = 0
        errors = []

        try:
            df = _read_csv(source)
        except (ValueError, OSError) as e:
            return 0, 0, [f"File error: {str(e)}"]

        airline_ids = {row[0] for row in self.db.query(Airline.id).all()}
        feature_ids = {row[0] for row in self.db.query(Feature.id).all()}

        for index, row in df.iterrows():
            line = index + 2
            try:
                airline_id = int(row["airline_id"])
                feature_id = int(row["feature_id"])
                value = _clean(row["value"])
                notes = _clean(row.get("notes"))
            except (KeyError, TypeError, ValueError) as e:
                errors.append(f"Row {line}: Value conversion error - {str(e)}")
                continue

            if not value:
                errors.append(f"Row {line}: Missing value")
                continue
            if airline_id not in airline_ids:
                errors.append(f"Row {line}: Airline ID {airline_id} not found")
                continue
            if feature_id not in feature_ids:
                errors.append(f"Row {line}: Feature ID {feature_id} not found")
                continue

            existing = (
                self.db.query(Implementation)
                .filter(
                    Implementation.airline_id == airline_id,
                    Implementation.feature_id == feature_id,
                )
                .first()
            )
            if existing:
                existing.value = value
                existing.notes = notes
            else:
                self.db.add(
                    Implementation(
                        airline_id=airline_id,
                        feature_id=feature_id,
                        value=value,
                        notes=notes,
                    )
                )

            if self._commit_row(line, errors):
                if existing:
                    updated_count += 1
                else:
                    created_count += 1

        logger.info(
            f"Implementations load: {created_count} created, "
            f"{updated_count} updated, {len(errors)} errors"
        )
        return created_count, updated_count, errors

    def _load_reference_rows(self, source: CsvSource, model, parse) -> Tuple[int, int, List[str]]:
        created_count = 0
        updated_count = 0
        errors = []

        try:
            df = _read_csv(source)
        except (ValueError, OSError) as e:
            return 0, 0, [f"File error: {str(e)}"]

        for index, row in df.iterrows():
            line = index + 2
            try:
                data = parse(row)
                record_id = _clean(row.get("id"))
                record_id = int(record_id) if record_id else None
            except (KeyError, TypeError, ValueError) as e:
                errors.append(f"Row {line}: Value conversion error - {str(e)}")
                continue

            if not data["name"]:
                errors.append(f"Row {line}: Missing name")
                continue

            query = self.db.query(model)
            if record_id is not None:
                existing = query.filter(model.id == record_id).first()
            else:
                existing = query.filter(model.name == data["name"]).first()

            if existing:
                for key, value in data.items():
                    setattr(existing, key, value)
            else:
                if record_id is not None:
                    data["id"] = record_id
                self.db.add(model(**data))

            if self._commit_row(line, errors):
                if existing:
                    updated_count += 1
                else:
                    created_count += 1

        logger.info(
            f"{model.__tablename__} load: {created_count} created, "
            f"{updated_count} updated, {len(errors)} errors"
        )
        return created_count, updated_count, errors

    def _commit_row(self, line: int, errors: List[str]) -> bool:
        try:
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            errors.append(f"Row {line}: Database error - {e.__class__.__name__}")
            return False
