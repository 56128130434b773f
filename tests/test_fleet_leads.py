"""Tests for B2B fleet lead capture."""

import pytest
from pydantic import ValidationError

from app.domain.fleet.schemas import FleetLeadCreate, FleetLeadUpdate
from app.domain.fleet.service import FleetLeadService
from app.models import FleetLeadStatus
from app.shared.exceptions import NotFoundError


def lead_data(**overrides) -> dict:
    data = {
        "company_name": "Sana'a Logistics",
        "contact_person": "Khaled",
        "phone": "+967 733 123 456",
    }
    data.update(overrides)
    return data


class TestFleetLeadService:
    def test_create_defaults_to_new(self, db):
        lead = FleetLeadService(db).create_lead(FleetLeadCreate(**lead_data()))
        assert lead.status == "new"
        assert lead.phone == "+967733123456"

    def test_any_status_may_follow_any_other(self, db):
        service = FleetLeadService(db)
        lead = service.create_lead(FleetLeadCreate(**lead_data()))
        for status in ("rejected", "new", "trial", "contacted"):
            lead = service.update_lead(lead.id, FleetLeadUpdate(status=status))
        assert lead.status == "contacted"

    def test_notes_update_keeps_status(self, db):
        service = FleetLeadService(db)
        lead = service.create_lead(FleetLeadCreate(**lead_data(status="trial")))
        lead = service.update_lead(lead.id, FleetLeadUpdate(notes="Call back Sunday"))
        assert lead.status == "trial"
        assert lead.notes == "Call back Sunday"

    def test_filter_by_status(self, db):
        service = FleetLeadService(db)
        service.create_lead(FleetLeadCreate(**lead_data()))
        service.create_lead(FleetLeadCreate(**lead_data(company_name="Aden Fleet", status="contacted")))
        leads = service.get_leads(FleetLeadStatus.CONTACTED)
        assert [lead.company_name for lead in leads] == ["Aden Fleet"]

    def test_update_missing_lead(self, db):
        with pytest.raises(NotFoundError) as exc:
            FleetLeadService(db).update_lead(404, FleetLeadUpdate(status="rejected"))
        assert exc.value.entity == "fleet lead"

    def test_rejects_bad_phone(self):
        with pytest.raises(ValidationError):
            FleetLeadCreate(**lead_data(phone="12345"))

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            FleetLeadUpdate(status="won")


class TestFleetLeadEndpoints:
    def test_create_list_and_update(self, client):
        created = client.post("/fleet-leads", json=lead_data())
        assert created.status_code == 201
        lead_id = created.json()["id"]

        response = client.patch(f"/fleet-leads/{lead_id}", json={"status": "contacted"})
        assert response.status_code == 200
        assert response.json()["status"] == "contacted"

        listed = client.get("/fleet-leads", params={"status": "contacted"}).json()
        assert [lead["id"] for lead in listed] == [lead_id]

    def test_patch_missing_lead_is_404(self, client):
        response = client.patch("/fleet-leads/999", json={"status": "rejected"})
        assert response.status_code == 404
        assert response.json()["entity"] == "fleet lead"
