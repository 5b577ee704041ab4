#!/usr/bin/env python3
"""
Script to create a bookable business with services and weekday hours
Usage: python -m app.scripts.create_business [slug]
"""
import sys
from datetime import time
from decimal import Decimal

from sqlalchemy.orm import Session

from app.api.dependencies import create_access_token
from app.config.database import SessionLocal
from app.models import Business, Service, WeeklySchedule

DEMO_SERVICES = [
    ("Haircut", "Wash, cut and style", Decimal("35.00"), 30),
    ("Colour", "Full colour treatment", Decimal("80.00"), 90),
    ("Beard trim", None, Decimal("15.00"), 15),
]


def create_demo_business(db: Session, slug: str = "demo-salon") -> Business:
    """Create a demo business open Monday-Friday 9:00-17:00 with 30 minute slots"""
    existing = db.query(Business).filter(Business.slug == slug).first()
    if existing:
        print(f"Business '{slug}' already exists: {existing.id}")
        return existing

    business = Business(
        name="Demo Salon",
        slug=slug,
        email="owner@demo-salon.test",
        phone_number="+15550100",
        timezone="Europe/Lisbon",
    )
    db.add(business)
    db.flush()

    for order, (name, description, price, duration) in enumerate(DEMO_SERVICES):
        db.add(Service(
            business_id=business.id,
            name=name,
            description=description,
            price=price,
            duration_minutes=duration,
            display_order=order,
        ))

    for day in range(5):  # 0=Monday ... 4=Friday
        db.add(WeeklySchedule(
            business_id=business.id,
            day_of_week=day,
            start_time=time(9, 0),
            end_time=time(17, 0),
            slot_duration_minutes=30,
        ))

    db.commit()
    db.refresh(business)
    return business


def main():
    slug = sys.argv[1] if len(sys.argv) > 1 else "demo-salon"
    db = SessionLocal()
    try:
        business = create_demo_business(db, slug)
        print(f"Business: {business.name} ({business.id})")
        print(f"Public booking slug: {business.slug}")
        for service in business.services:
            print(f"  service {service.id}: {service.name}, {service.duration_minutes} min")
        print(f"Dashboard token: {create_access_token(business.id)}")
    except Exception as e:
        db.rollback()
        print(f"Error creating business: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
