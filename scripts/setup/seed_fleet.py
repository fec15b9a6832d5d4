# scripts/setup/seed_fleet.py
"""
Seed a fresh database with sample sites and vehicles, and grant a fleet admin role.
Existing registrations / site names are skipped, so the script can be re-run.
Usage: python scripts/setup/seed_fleet.py --admin <user-id> [--role admin|fleet_admin]
                                          [--email <email> --name <full name>]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from datetime import date, datetime, timedelta
from app.database import SessionLocal, create_tables
from app.exceptions import DuplicateRegistration
from app.models.profile import Profile
from app.models.site import Site
from app.models.user_role import AppRole
from app.models.vehicle import VehicleStatus, VehicleType
from app.services.role_service import set_user_role
from app.services.vehicle_service import create_vehicle

SITES = [
    {"name": "Main Depot", "location": "North Industrial Park"},
    {"name": "Warehouse B", "location": "Harbour Road"},
]

VEHICLES = [
    # registration, type, make, model, year, site index, mileage, hours, fuel, battery
    ("TRK-1001", VehicleType.TRUCK, "Volvo", "FH16", 2021, 0, 84250, None, 70, None),
    ("TRK-1002", VehicleType.TRUCK, "Scania", "R450", 2020, 0, 120400, None, 45, None),
    ("FLT-2001", VehicleType.FORKLIFT, "Toyota", "8FBE20", 2022, 1, None, 1830.5, None, 88),
    ("FLT-2002", VehicleType.FORKLIFT, "Linde", "E20", 2019, 1, None, 5412.0, None, 34),
    ("CAR-3001", VehicleType.CAR, "Skoda", "Octavia", 2023, 0, 15300, None, 90, None),
]


def seed_sites(db):
    sites = []
    for entry in SITES:
        site = db.query(Site).filter(Site.name == entry["name"]).first()
        if not site:
            site = Site(name=entry["name"], location=entry["location"], created_at=datetime.utcnow())
            db.add(site)
            db.commit()
            print(f"   + site {site.name}")
        sites.append(site)
    return sites


def seed_profile(db, user_id, email, full_name=None):
    profile = db.get(Profile, user_id)
    now = datetime.utcnow()
    if profile:
        profile.email = email
        profile.full_name = full_name or profile.full_name
        profile.updated_at = now
    else:
        db.add(Profile(id=user_id, email=email, full_name=full_name, created_at=now, updated_at=now))
    db.commit()
    print(f"   + profile {email}")


def seed_vehicles(db, sites):
    today = date.today()
    for reg, vtype, make, model, year, site_idx, mileage, hours, fuel, battery in VEHICLES:
        try:
            create_vehicle(db, {
                "registration_number": reg,
                "type": vtype,
                "make": make,
                "model": model,
                "year": year,
                "location": sites[site_idx].location,
                "site_id": sites[site_idx].id,
                "status": VehicleStatus.AVAILABLE,
                "mileage": mileage,
                "operating_hours": hours,
                "fuel_level": fuel,
                "battery_level": battery,
                "last_inspection": today - timedelta(days=30),
                "next_maintenance": today + timedelta(days=60),
            })
            print(f"   + vehicle {reg}")
        except DuplicateRegistration:
            print(f"   = vehicle {reg} already present")


def main():
    parser = argparse.ArgumentParser(description="Seed sample fleet data")
    parser.add_argument("--admin", help="User id to grant a fleet admin role")
    parser.add_argument("--role", default=AppRole.FLEET_ADMIN.value,
                        choices=[AppRole.ADMIN.value, AppRole.FLEET_ADMIN.value])
    parser.add_argument("--email", help="Profile email for the --admin user")
    parser.add_argument("--name", help="Profile full name for the --admin user")
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        print("🌱 Seeding sites...")
        sites = seed_sites(db)
        print("🚚 Seeding vehicles...")
        seed_vehicles(db, sites)
        if args.admin:
            set_user_role(db, args.admin, AppRole(args.role))
            print(f"🔑 {args.admin} is now {args.role}")
            if args.email:
                seed_profile(db, args.admin, args.email, args.name)
    finally:
        db.close()
    print("✅ Done")


if __name__ == "__main__":
    main()
