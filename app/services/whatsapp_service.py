"""
WhatsApp Notification Service
Sends templated booking messages through the Twilio WhatsApp API
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from ..config import (
    TWILIO_ACCOUNT_SID,
    TWILIO_API_BASE_URL,
    TWILIO_AUTH_TOKEN,
    TWILIO_WHATSAPP_FROM,
    WHATSAPP_DEFAULT_LANGUAGE,
    WHATSAPP_ENABLED,
    WHATSAPP_TIMEOUT_SECONDS,
)
from ..models_whatsapp import WhatsAppMessageLog, WhatsAppTemplate
from ..shared.exceptions import InvalidError

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class TemplateKey(str, Enum):
    CONFIRM = "confirm"
    REMINDER = "reminder"
    ON_THE_WAY = "on_the_way"
    REVIEW = "review"
    CUSTOM = "custom"


# Used when the whatsapp_templates table has no row for a key
DEFAULT_TEMPLATES = {
    TemplateKey.CONFIRM: {
        "ar": "مرحباً {{name}}، تم تأكيد حجزك {{booking_id}} لخدمة {{service_name}} بتاريخ {{date}}. المبلغ: {{price_total}}",
        "en": "Hi {{name}}, your booking {{booking_id}} for {{service_name}} on {{date}} is confirmed. Total: {{price_total}}",
    },
    TemplateKey.REMINDER: {
        "ar": "تذكير: موعد {{service_name}} بتاريخ {{date}}",
        "en": "Reminder: your {{service_name}} appointment is on {{date}}",
    },
    TemplateKey.ON_THE_WAY: {
        "ar": "فريقنا في الطريق إليك لحجز {{booking_id}}",
        "en": "Our team is on the way for booking {{booking_id}}",
    },
    TemplateKey.REVIEW: {
        "ar": "شكراً {{name}}! نأمل أن تكون راضياً عن خدمتنا. يرجى تقييم حجز {{booking_id}}",
        "en": "Thanks {{name}}! We hope you enjoyed our service. Please rate booking {{booking_id}}",
    },
}


@dataclass
class WhatsAppReceipt:
    message_id: Optional[str]
    status: str  # sent, failed, skipped
    error: Optional[str] = None


def render_template(body: str, variables: Optional[dict] = None) -> str:
    """Substitute {{name}} placeholders; unknown placeholders are left as written"""
    variables = variables or {}

    def replace(match: re.Match) -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return PLACEHOLDER_RE.sub(replace, body)


def resolve_template_body(db: Session, template_key: TemplateKey, language: str) -> str:
    """Template body from the database, falling back to the built-in default"""
    template = db.query(WhatsAppTemplate).filter(WhatsAppTemplate.key == template_key.value).first()
    if template:
        return template.body_ar if language == "ar" else template.body_en
    return DEFAULT_TEMPLATES[template_key][language]


def _log_message(db: Session, to_phone: str, template_key: TemplateKey, language: str, body: str,
                 status: str, entity_type: Optional[str], entity_id: Optional[int],
                 message_sid: Optional[str] = None, error_message: Optional[str] = None) -> None:
    db.add(
        WhatsAppMessageLog(
            to_phone=to_phone,
            template_key=template_key.value,
            language=language,
            message_body=body,
            entity_type=entity_type,
            entity_id=entity_id,
            provider_message_sid=message_sid,
            status=status,
            error_message=error_message,
        )
    )
    db.commit()


async def send_whatsapp_message(
    db: Session,
    phone: str,
    template_key: TemplateKey,
    variables: Optional[dict] = None,
    language: Optional[str] = None,
    custom_message: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> WhatsAppReceipt:
    """
    Send a WhatsApp message via Twilio

    Args:
        db: Database session
        phone: Recipient phone number in E.164 format
        template_key: Which template to render
        variables: Values for the template placeholders
        language: "ar" or "en" (defaults to WHATSAPP_DEFAULT_LANGUAGE)
        custom_message: Body to send for the custom template
        entity_type: Optional entity type for the log (e.g. "booking")
        entity_id: Optional entity ID for the log
        transport: Optional httpx transport (tests pass a MockTransport)

    Returns:
        WhatsAppReceipt with the provider message id on success

    Raises:
        InvalidError: For an unknown language or a custom message without a body
    """
    template_key = TemplateKey(template_key)
    language = language or WHATSAPP_DEFAULT_LANGUAGE
    if language not in ("ar", "en"):
        raise InvalidError("language", f"unsupported language {language!r}")

    if template_key == TemplateKey.CUSTOM:
        if not custom_message:
            raise InvalidError("custom_message", "required for the custom template")
        body = render_template(custom_message, variables)
    else:
        body = render_template(resolve_template_body(db, template_key, language), variables)

    if not WHATSAPP_ENABLED or not (TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN and TWILIO_WHATSAPP_FROM):
        logger.debug(f"ℹ️ WhatsApp disabled or not configured, skipping {template_key.value} to {phone}")
        _log_message(db, phone, template_key, language, body, "skipped", entity_type, entity_id)
        return WhatsAppReceipt(message_id=None, status="skipped")

    data = {
        "To": f"whatsapp:{phone}",
        "From": f"whatsapp:{TWILIO_WHATSAPP_FROM}",
        "Body": body,
    }

    try:
        logger.info(f"🚀 Sending WhatsApp {template_key.value} to {phone}")
        async with httpx.AsyncClient(transport=transport, timeout=WHATSAPP_TIMEOUT_SECONDS) as client:
            response = await client.post(
                f"{TWILIO_API_BASE_URL}/Accounts/{TWILIO_ACCOUNT_SID}/Messages.json",
                auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
                data=data,
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Twilio WhatsApp request failed: {e}")
        _log_message(db, phone, template_key, language, body, "failed", entity_type, entity_id,
                     error_message=str(e))
        return WhatsAppReceipt(message_id=None, status="failed", error=str(e))

    logger.info(f"📡 Twilio API response status: {response.status_code}")

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if response.status_code in (200, 201):
        message_sid = payload.get("sid")
        _log_message(db, phone, template_key, language, body, "sent", entity_type, entity_id,
                     message_sid=message_sid)
        logger.info(f"✅ WhatsApp {template_key.value} sent to {phone} (SID: {message_sid})")
        return WhatsAppReceipt(message_id=message_sid, status="sent")

    error_message = payload.get("message") or response.text or "Unknown error"
    error_code = payload.get("code")
    if error_code:
        error_message = f"[{error_code}] {error_message}"
    _log_message(db, phone, template_key, language, body, "failed", entity_type, entity_id,
                 error_message=error_message)
    logger.error(f"❌ Twilio API error: {error_message}")
    return WhatsAppReceipt(message_id=None, status="failed", error=error_message)
