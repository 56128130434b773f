"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Customer

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def get_by_phone(db: Session, phone: str) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.phone == phone).first()

    @staticmethod
    def get_by_id(db: Session, customer_id: int) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def insert_if_absent(db: Session, name: str, phone: str) -> bool:
        """
        Insert a customer unless the phone is already taken.

        Uses INSERT ... ON CONFLICT DO NOTHING where the dialect supports it,
        otherwise a plain insert whose unique violation is treated as "already there".

        Returns:
            True if this call created the row
        """
        values = {"name": name, "phone": phone, "whatsapp_verified": False}
        insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)

        if insert is not None:
            stmt = insert(Customer).values(**values).on_conflict_do_nothing(index_elements=["phone"])
            result = db.execute(stmt)
            db.commit()
            return result.rowcount == 1

        try:
            db.add(Customer(**values))
            db.commit()
            return True
        except IntegrityError:
            db.rollback()
            return False
