# scripts/setup/init_db.py
"""
Initialize database — creates all tables and, with --seed, a handful of demo zones.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--seed]
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from decimal import Decimal
from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.services.zone_service import create_zone, get_zone_by_number
from sqlalchemy import text

DEMO_ZONES = [
    {"zone_number": "A1", "zone_name": "Downtown Main Street", "location_type": "STREET",
     "rate_per_hour": Decimal("2.00"), "max_duration_hours": Decimal("4"),
     "address": "123 Main Street, Stamford, CT",
     "restrictions": {"time_restrictions": [
         {"start_time": "16:00", "end_time": "18:00", "days_of_week": [1, 2, 3, 4, 5],
          "restriction_type": "RUSH_HOUR", "description": "No parking during evening rush"},
     ]}},
    {"zone_number": "B2", "zone_name": "City Hall Parking Lot", "location_type": "LOT",
     "rate_per_hour": Decimal("1.50"), "max_duration_hours": Decimal("8"),
     "address": "888 Washington Blvd, Stamford, CT", "restrictions": None},
    {"zone_number": "C3", "zone_name": "Harbor Point Garage", "location_type": "GARAGE",
     "rate_per_hour": Decimal("3.00"), "max_duration_hours": Decimal("12"),
     "address": "123 Harbor Point Road, Stamford, CT", "restrictions": None},
    {"zone_number": "D4", "zone_name": "Train Station North", "location_type": "METER",
     "rate_per_hour": Decimal("2.50"), "max_duration_hours": Decimal("2"),
     "address": "1 Station Place, Stamford, CT",
     "restrictions": {"time_restrictions": [
         {"start_time": "03:00", "end_time": "05:00", "days_of_week": [2],
          "restriction_type": "STREET_CLEANING", "description": "Tuesday street cleaning"},
     ]}},
]


def seed_zones():
    db = SessionLocal()
    try:
        for zone in DEMO_ZONES:
            if get_zone_by_number(db, zone["zone_number"]):
                print(f"   • {zone['zone_number']} already exists")
                continue
            create_zone(db, **zone)
            print(f"   ✓ {zone['zone_number']} {zone['zone_name']} (${zone['rate_per_hour']}/h)")
    finally:
        db.close()


def main():
    print("🗄️  Parking DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    print("✅ All tables created")

    with engine.connect() as conn:
        result = conn.execute(text(
            "SELECT tablename FROM pg_tables WHERE schemaname='public' ORDER BY tablename"
        ))
        tables = [row[0] for row in result]

    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if "--seed" in sys.argv:
        print("\n🌱 Seeding demo zones...")
        seed_zones()

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host 0.0.0.0 --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
