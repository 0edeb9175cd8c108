"""
Customer Management Module

Registers customers and maintains their contact details. Email addresses are
unique across the bank (compared case-insensitively).
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional
import re

from .storage import StorageInterface, StorageRecord
from .audit import AuditTrail, AuditEventType
from .errors import ValidationError, DuplicateEmailError, NotFoundError
from .logging_config import get_logger, log_action


EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PHONE_MAX_LENGTH = 15


def _validate_email(email: Optional[str]) -> str:
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("Customer email is required")
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"Invalid email format: {email}")
    return email


def _validate_phone(phone: Optional[str]) -> Optional[str]:
    if phone is None:
        return None
    if not isinstance(phone, str):
        raise ValidationError("Phone number must be a string")
    phone = phone.strip()
    if not phone:
        return None
    if len(phone) > PHONE_MAX_LENGTH:
        raise ValidationError(f"Phone number must be at most {PHONE_MAX_LENGTH} characters")
    return phone


@dataclass
class Customer(StorageRecord):
    """Bank customer"""
    name: str
    email: str
    phone: Optional[str] = None


class CustomerManager:
    """
    Manages customer registration and contact details
    """

    def __init__(self, storage: StorageInterface, audit_trail: AuditTrail):
        self.storage = storage
        self.audit_trail = audit_trail
        self.table_name = "customers"
        self.logger = get_logger("minibank.customers")

    def open_customer(self, name: str, email: str, phone: Optional[str] = None) -> Customer:
        """
        Register a new customer

        Args:
            name: Customer's full name
            email: Unique email address
            phone: Optional phone number

        Returns:
            Created Customer object

        Raises:
            ValidationError: If name or email is missing or malformed
            DuplicateEmailError: If the email is already registered
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Customer name is required")
        name = name.strip()
        email = _validate_email(email)
        phone = _validate_phone(phone)

        with self.storage.atomic():
            self._ensure_email_available(email)

            now = datetime.now(timezone.utc)
            customer = Customer(
                id=self.storage.next_id(self.table_name),
                created_at=now,
                updated_at=now,
                name=name,
                email=email,
                phone=phone
            )
            self._save_customer(customer)

        log_action(
            self.logger, "info", "Customer registered",
            action="open_customer", resource=f"customer:{customer.id}",
            extra={"customer_id": customer.id, "email": email}
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.CUSTOMER_CREATED,
            entity_type="customer",
            entity_id=customer.id,
            metadata={"name": name, "email": email}
        )

        return customer

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID"""
        data = self.storage.load(self.table_name, customer_id)
        if data:
            return Customer.from_dict(data)
        return None

    def require_customer(self, customer_id: int) -> Customer:
        """Get customer by ID or raise NotFoundError"""
        customer = self.get_customer(customer_id)
        if not customer:
            raise NotFoundError("customer", customer_id)
        return customer

    def get_customer_by_email(self, email: str) -> Optional[Customer]:
        """Get customer by email address (case-insensitive)"""
        wanted = email.strip().lower()
        for data in self.storage.load_all(self.table_name):
            if data['email'].lower() == wanted:
                return Customer.from_dict(data)
        return None

    def list_customers(self) -> List[Customer]:
        """All customers in registration order"""
        customers = [Customer.from_dict(data) for data in self.storage.load_all(self.table_name)]
        customers.sort(key=lambda c: c.id)
        return customers

    def update_contact(
        self,
        customer_id: int,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Customer:
        """Update a customer's email and/or phone"""
        with self.storage.atomic():
            customer = self.require_customer(customer_id)
            old_data = {"email": customer.email, "phone": customer.phone}

            if email is not None:
                email = _validate_email(email)
                if email.lower() != customer.email.lower():
                    self._ensure_email_available(email)
                customer.email = email
            if phone is not None:
                customer.phone = _validate_phone(phone)

            customer.updated_at = datetime.now(timezone.utc)
            self._save_customer(customer)

        self.audit_trail.log_event(
            event_type=AuditEventType.CUSTOMER_UPDATED,
            entity_type="customer",
            entity_id=customer.id,
            metadata={
                "old_data": old_data,
                "new_data": {"email": customer.email, "phone": customer.phone}
            }
        )

        return customer

    def _ensure_email_available(self, email: str) -> None:
        if self.get_customer_by_email(email):
            raise DuplicateEmailError(email)

    def _save_customer(self, customer: Customer) -> None:
        self.storage.save(self.table_name, customer.id, customer.to_dict())
