# ============================================================================
# app/services/appointment/appointment_query_service.py
# Business-side (authenticated) appointment reads. No FastAPI dependencies.
# ============================================================================
from sqlalchemy.orm import Session
from datetime import datetime, date, timedelta
from typing import Optional, Dict, Any
from uuid import UUID

from app.core.exceptions import NotFound
from app.models.appointment import Appointment, AppointmentStatus


class AppointmentQueryService:
    """Service layer for reading a business's appointments."""

    @staticmethod
    def get_for_business(db: Session, business_id: UUID, appointment_id: UUID) -> Appointment:
        """
        Load one appointment owned by the business.
        Cancelled appointments stay visible here after their public token is revoked.
        """
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.business_id == business_id
        ).first()

        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    @staticmethod
    def list_appointments(
            db: Session,
            business_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[AppointmentStatus] = None,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """Get paginated list of appointments with filters."""
        query = db.query(Appointment).filter(Appointment.business_id == business_id)

        if start_date:
            query = query.filter(Appointment.appointment_datetime >= datetime.combine(start_date, datetime.min.time()))
        if end_date:
            query = query.filter(
                Appointment.appointment_datetime < datetime.combine(end_date + timedelta(days=1), datetime.min.time())
            )
        if status:
            query = query.filter(Appointment.status == status)

        query = query.order_by(Appointment.appointment_datetime.asc())
        total = query.count()
        appointments = query.offset(skip).limit(limit).all()

        return {
            "business_id": str(business_id),
            "total_appointments": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "filters": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
                "status": status.value if status else None,
            },
            "appointments": [appt.to_dict() for appt in appointments]
        }
