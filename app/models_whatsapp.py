"""
WhatsApp Notification Models
Message templates and a delivery log for outbound WhatsApp messages
"""

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


class WhatsAppTemplate(Base):
    """Localized message bodies keyed by template (confirm, on_the_way, ...)"""

    __tablename__ = "whatsapp_templates"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(50), unique=True, index=True, nullable=False)
    body_ar = Column(Text, nullable=False)
    body_en = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class WhatsAppMessageLog(Base):
    """Track WhatsApp messages sent (or skipped) by the notifier"""

    __tablename__ = "whatsapp_message_logs"

    id = Column(Integer, primary_key=True, index=True)

    # Message details
    to_phone = Column(String(20), nullable=False)
    template_key = Column(String(50), nullable=False)
    language = Column(String(2), nullable=False)
    message_body = Column(Text, nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, nullable=True)

    # Provider response
    provider_message_sid = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False)  # sent, failed, skipped
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
