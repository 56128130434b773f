"""Fleet lead repository - Database operations for fleet leads"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import FleetLead


class FleetLeadRepository:
    """Repository for fleet lead database operations"""

    @staticmethod
    def create_lead(db: Session, **lead_data) -> FleetLead:
        lead = FleetLead(**lead_data)
        db.add(lead)
        db.commit()
        db.refresh(lead)
        return lead

    @staticmethod
    def get_leads(db: Session, status: Optional[str] = None) -> list[FleetLead]:
        """Get leads, newest first"""
        query = db.query(FleetLead)
        if status:
            query = query.filter(FleetLead.status == status)
        return query.order_by(FleetLead.created_at.desc(), FleetLead.id.desc()).all()

    @staticmethod
    def get_lead_by_id(db: Session, lead_id: int) -> Optional[FleetLead]:
        return db.query(FleetLead).filter(FleetLead.id == lead_id).first()

    @staticmethod
    def update_lead(db: Session, lead: FleetLead, **updates) -> FleetLead:
        """Update a lead with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(lead, key):
                setattr(lead, key, value)
        db.commit()
        db.refresh(lead)
        return lead
