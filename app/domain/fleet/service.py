"""Fleet lead service - Business logic for B2B lead capture"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import FleetLead, FleetLeadStatus
from ...shared.exceptions import NotFoundError
from .repository import FleetLeadRepository
from .schemas import FleetLeadCreate, FleetLeadUpdate

logger = logging.getLogger(__name__)


class FleetLeadService:
    """Service layer for fleet leads; any status may follow any other"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = FleetLeadRepository()

    def create_lead(self, data: FleetLeadCreate) -> FleetLead:
        lead = self.repo.create_lead(
            self.db,
            company_name=data.company_name,
            contact_person=data.contact_person,
            phone=data.phone,
            status=data.status.value,
            notes=data.notes,
        )
        logger.info(f"🏢 Fleet lead created: {lead.company_name} (id={lead.id})")
        return lead

    def get_leads(self, status: Optional[FleetLeadStatus] = None) -> list[FleetLead]:
        return self.repo.get_leads(self.db, status.value if status else None)

    def update_lead(self, lead_id: int, data: FleetLeadUpdate) -> FleetLead:
        lead = self.repo.get_lead_by_id(self.db, lead_id)
        if not lead:
            raise NotFoundError("fleet lead", lead_id)

        updates = {}
        if data.status is not None:
            updates["status"] = data.status.value
        if data.notes is not None:
            updates["notes"] = data.notes

        previous_status = lead.status
        lead = self.repo.update_lead(self.db, lead, **updates)
        if lead.status != previous_status:
            logger.info(f"🏢 Fleet lead {lead.id} transitioned: {previous_status} → {lead.status}")
        return lead
