"""Customer directory - One customer per phone number"""

import logging
import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ...config import CUSTOMER_UPSERT_RETRIES
from ...models import Customer
from ...shared.exceptions import NotFoundError, TransientError
from .repository import CustomerRepository

logger = logging.getLogger(__name__)


class CustomerDirectory:
    """Resolves a phone number to exactly one Customer"""

    def __init__(self, db: Session, max_attempts: int = CUSTOMER_UPSERT_RETRIES):
        self.db = db
        self.repo = CustomerRepository()
        self.max_attempts = max(1, max_attempts)

    def resolve(self, name: str, phone: str) -> Customer:
        """
        Find the customer for a phone, creating it on first sight.

        The first name recorded for a phone wins; later names are ignored.
        Safe under concurrent calls for the same new phone.

        Raises:
            TransientError: If the database stays unavailable after retries
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                customer = self.repo.get_by_phone(self.db, phone)
                if customer:
                    return customer

                created = self.repo.insert_if_absent(self.db, name, phone)
                customer = self.repo.get_by_phone(self.db, phone)
                if created:
                    logger.info(f"👤 Customer created: id={customer.id}")
                else:
                    logger.info(f"👤 Customer for phone already existed, reusing id={customer.id}")
                return customer
            except OperationalError as e:
                self.db.rollback()
                if attempt == self.max_attempts:
                    logger.error(f"❌ Customer upsert failed after {attempt} attempts: {e}")
                    raise TransientError("customer upsert") from e
                logger.warning(f"⚠️ Customer upsert attempt {attempt} failed, retrying: {e}")
                time.sleep(0.05 * attempt)

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_by_id(self.db, customer_id)
        if not customer:
            raise NotFoundError("customer", customer_id)
        return customer
