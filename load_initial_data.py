#!/usr/bin/env python3
"""
Script for loading initial data from CSV files, or the built-in sample set
when no files are present.
Run from project root: python load_initial_data.py
"""
from pathlib import Path

from app import models  # noqa: F401
from app.database import Base, engine
from app.services.data_loader import DataLoader


def create_tables():
    """Create all tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Tables created successfully")


def report(label, created, updated, errors):
    print(f"   {label}: {created} created, {updated} updated")
    for error in errors[:10]:
        print(f"     - {error}")
    if len(errors) > 10:
        print(f"     ... and {len(errors) - 10} more errors")


def main():
    """Main function"""
    print("🚀 Starting initial data load...")

    create_tables()

    data_dir = Path("data")
    airlines_file = data_dir / "airlines.csv"
    features_file = data_dir / "features.csv"
    implementations_file = data_dir / "implementations.csv"

    loader = DataLoader()

    try:
        if not all(f.exists() for f in (airlines_file, features_file, implementations_file)):
            print("📊 No data files found, loading sample data...")
            if loader.seed_sample_data():
                print("🎉 Sample data loaded")
            else:
                print("Database already contains data, nothing to do")
            return

        print("📊 Loading airlines...")
        report("Airlines", *loader.load_airlines_from_csv(str(airlines_file)))

        print("📊 Loading features...")
        report("Features", *loader.load_features_from_csv(str(features_file)))

        print("📊 Loading implementations...")
        report("Implementations", *loader.load_implementations_from_csv(str(implementations_file)))

        print("\n🎉 Loading completed!")

    finally:
        loader.close()


if __name__ == "__main__":
    main()
