# app/services/customer/customer_service.py
"""Service for matching and updating customers at booking time"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.customer import Customer
from app.schemas.booking import CustomerInfo
import logging

logger = logging.getLogger(__name__)


class CustomerService:
    """Handles customer operations"""

    @staticmethod
    def find_customer(db: Session, business_id: UUID, phone: str, email: Optional[str]) -> Optional[Customer]:
        """Match by phone within the business, then by email"""
        customer = db.query(Customer).filter(
            Customer.business_id == business_id,
            Customer.phone == phone
        ).first()

        if customer is None and email:
            customer = db.query(Customer).filter(
                Customer.business_id == business_id,
                Customer.email == email
            ).first()

        return customer

    @staticmethod
    def find_or_create(db: Session, business_id: UUID, info: CustomerInfo) -> Customer:
        """Match an existing customer or add a new one to the session (no commit)"""
        customer = CustomerService.find_customer(db, business_id, info.phone, info.email)

        if customer is None:
            customer = Customer(
                business_id=business_id,
                first_name=info.first_name,
                last_name=info.last_name,
                phone=info.phone,
                email=info.email,
                total_appointments=0,
            )
            db.add(customer)
            logger.info(f"Created customer for business {business_id}")
            return customer

        customer.first_name = info.first_name
        customer.last_name = info.last_name
        customer.phone = info.phone
        if info.email:
            customer.email = info.email
        return customer

    @staticmethod
    def record_booking(customer: Customer, appointment_datetime: datetime):
        customer.total_appointments = (customer.total_appointments or 0) + 1
        if customer.last_appointment_at is None or appointment_datetime > customer.last_appointment_at:
            customer.last_appointment_at = appointment_datetime
