"""Tests for the WhatsApp notifier."""

from urllib.parse import parse_qs

import httpx
import pytest

from app.models_whatsapp import WhatsAppMessageLog, WhatsAppTemplate
from app.services import whatsapp_service
from app.services.whatsapp_service import TemplateKey, render_template, send_whatsapp_message
from app.shared.exceptions import InvalidError

PHONE = "+967777123456"


@pytest.fixture
def twilio_enabled(monkeypatch):
    monkeypatch.setattr(whatsapp_service, "WHATSAPP_ENABLED", True)
    monkeypatch.setattr(whatsapp_service, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(whatsapp_service, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(whatsapp_service, "TWILIO_WHATSAPP_FROM", "+14155238886")


@pytest.fixture
def templates(db):
    db.add(
        WhatsAppTemplate(
            key="confirm",
            body_ar="تم تأكيد حجزك {{booking_id}} في {{service_name}} يوم {{date}}",
            body_en="Your booking {{booking_id}} for {{service_name}} on {{date}} is confirmed",
        )
    )
    db.commit()


class TestRenderTemplate:
    def test_substitutes_variables(self):
        assert render_template("Hi {{name}}", {"name": "Ali"}) == "Hi Ali"

    def test_tolerates_inner_spaces(self):
        assert render_template("Hi {{ name }}", {"name": "Ali"}) == "Hi Ali"

    def test_leaves_unknown_placeholders(self):
        assert render_template("ETA {{eta}} min", {}) == "ETA {{eta}} min"


class TestSkipped:
    @pytest.mark.asyncio
    async def test_disabled_is_skipped_and_logged(self, db, templates):
        receipt = await send_whatsapp_message(
            db, PHONE, TemplateKey.CONFIRM, {"booking_id": "BK000001"}, language="en"
        )
        assert receipt.status == "skipped"
        assert receipt.message_id is None
        log = db.query(WhatsAppMessageLog).one()
        assert log.status == "skipped"
        assert log.message_body.startswith("Your booking BK000001")

    @pytest.mark.asyncio
    async def test_missing_credentials_is_skipped(self, db, monkeypatch):
        monkeypatch.setattr(whatsapp_service, "WHATSAPP_ENABLED", True)
        monkeypatch.setattr(whatsapp_service, "TWILIO_ACCOUNT_SID", None)
        receipt = await send_whatsapp_message(db, PHONE, TemplateKey.REMINDER, {})
        assert receipt.status == "skipped"


class TestSend:
    @pytest.mark.asyncio
    async def test_sends_template_from_database(self, db, templates, twilio_enabled):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["form"] = parse_qs(request.content.decode())
            return httpx.Response(201, json={"sid": "SM123", "status": "queued"})

        receipt = await send_whatsapp_message(
            db,
            PHONE,
            TemplateKey.CONFIRM,
            {"booking_id": "BK000001", "service_name": "Car Cleaning", "date": "2024-01-15"},
            language="en",
            transport=httpx.MockTransport(handler),
        )

        assert receipt.status == "sent"
        assert receipt.message_id == "SM123"
        assert captured["url"].endswith("/Accounts/AC123/Messages.json")
        assert captured["form"]["To"] == [f"whatsapp:{PHONE}"]
        assert captured["form"]["From"] == ["whatsapp:+14155238886"]
        assert captured["form"]["Body"] == ["Your booking BK000001 for Car Cleaning on 2024-01-15 is confirmed"]
        assert db.query(WhatsAppMessageLog).one().provider_message_sid == "SM123"

    @pytest.mark.asyncio
    async def test_arabic_body_selected(self, db, templates, twilio_enabled):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(parse_qs(request.content.decode())["Body"][0])
            return httpx.Response(201, json={"sid": "SM124"})

        await send_whatsapp_message(
            db, PHONE, TemplateKey.CONFIRM, {"booking_id": "BK000001"}, language="ar",
            transport=httpx.MockTransport(handler),
        )
        assert bodies[0].startswith("تم تأكيد حجزك BK000001")

    @pytest.mark.asyncio
    async def test_falls_back_to_default_template(self, db, twilio_enabled):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(parse_qs(request.content.decode())["Body"][0])
            return httpx.Response(201, json={"sid": "SM125"})

        receipt = await send_whatsapp_message(
            db, PHONE, TemplateKey.ON_THE_WAY, {"booking_id": "BK000009"}, language="en",
            transport=httpx.MockTransport(handler),
        )
        assert receipt.status == "sent"
        assert "BK000009" in bodies[0]

    @pytest.mark.asyncio
    async def test_custom_message(self, db, twilio_enabled):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(parse_qs(request.content.decode())["Body"][0])
            return httpx.Response(201, json={"sid": "SM126"})

        await send_whatsapp_message(
            db, PHONE, TemplateKey.CUSTOM, {"name": "Ali"}, custom_message="Hello {{name}}",
            transport=httpx.MockTransport(handler),
        )
        assert bodies == ["Hello Ali"]


class TestFailures:
    @pytest.mark.asyncio
    async def test_provider_error(self, db, twilio_enabled):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})

        receipt = await send_whatsapp_message(
            db, PHONE, TemplateKey.REVIEW, {}, transport=httpx.MockTransport(handler)
        )
        assert receipt.status == "failed"
        assert receipt.error == "[21211] Invalid 'To' Phone Number"
        assert db.query(WhatsAppMessageLog).one().status == "failed"

    @pytest.mark.asyncio
    async def test_network_error(self, db, twilio_enabled):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        receipt = await send_whatsapp_message(
            db, PHONE, TemplateKey.REVIEW, {}, transport=httpx.MockTransport(handler)
        )
        assert receipt.status == "failed"
        assert "timed out" in receipt.error

    @pytest.mark.asyncio
    async def test_custom_without_body_is_invalid(self, db):
        with pytest.raises(InvalidError):
            await send_whatsapp_message(db, PHONE, TemplateKey.CUSTOM, {})

    @pytest.mark.asyncio
    async def test_unknown_language_is_invalid(self, db):
        with pytest.raises(InvalidError):
            await send_whatsapp_message(db, PHONE, TemplateKey.CONFIRM, {}, language="fr")
