from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Draft records produced by import mapping, before they are committed.

Drafts are frozen; the staging step edits a row by replacing its draft
(``dataclasses.replace``). ``to_record`` renders the persisted shape shared
with the web client (camelCase keys, enum values as stored strings).
"""

__all__ = [
    "ImportKind",
    "InsuranceType",
    "ExpenseCategory",
    "PaymentMethod",
    "DraftPatient",
    "DraftExpense",
    "DraftRevenue",
    "Draft",
    "LAST_NAME_SENTINEL",
    "FIRST_NAME_SENTINEL",
    "FIRST_NAME_PLACEHOLDER",
    "UNSPECIFIED_PATIENT_ID",
    "UNSPECIFIED_PATIENT_NAME",
]

LAST_NAME_SENTINEL = "NAME TO FILL"
FIRST_NAME_SENTINEL = "First name"
FIRST_NAME_PLACEHOLDER = "-"  # single-token full name

UNSPECIFIED_PATIENT_ID = "divers"
UNSPECIFIED_PATIENT_NAME = "Divers"


class ImportKind(Enum):
    """What a spreadsheet is imported as, and the store entity it lands in."""
    PATIENTS = "patients"
    EXPENSES = "expenses"
    REVENUES = "revenues"

    @property
    def entity(self) -> str:
        return "invoices" if self is ImportKind.REVENUES else self.value

    @property
    def is_ledger(self) -> bool:
        return self is not ImportKind.PATIENTS


class InsuranceType(Enum):
    NONE = "AUCUNE"
    PUBLIC_A = "CNSS"
    PUBLIC_B = "CNOPS"
    PRIVATE = "PRIVEE"


class ExpenseCategory(Enum):
    FIXED = "FIXED"
    CONSUMABLE = "CONSUMABLE"
    SALARY = "SALARY"
    EQUIPMENT = "EQUIPMENT"
    TAX = "TAX"
    OTHER = "OTHER"


class PaymentMethod(Enum):
    CASH = "ESPECES"
    CHECK = "CHEQUE"
    TRANSFER = "VIREMENT"
    CARD = "CARTE"


@dataclass(frozen=True)
class DraftPatient:
    last_name: str
    first_name: str
    birth_date: str  # ISO
    birth_date_detected: bool
    national_id: str = ""
    phone: str = ""
    email: str = ""
    insurance_type: InsuranceType = InsuranceType.NONE
    insurance_number: str = ""
    address: str = ""
    medical_history: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    source_row: int | None = None

    @property
    def needs_review(self) -> bool:
        return (
            self.last_name == LAST_NAME_SENTINEL
            or self.first_name == FIRST_NAME_SENTINEL
            or not self.birth_date_detected
        )

    def to_record(self, record_id: str, created_at: str) -> dict[str, Any]:
        return {
            "id": record_id,
            "createdAt": created_at,
            "lastName": self.last_name,
            "firstName": self.first_name,
            "birthDate": self.birth_date,
            "cin": self.national_id,
            "phone": self.phone,
            "email": self.email,
            "insuranceType": self.insurance_type.value,
            "insuranceNumber": self.insurance_number,
            "address": self.address,
            "medicalHistory": list(self.medical_history),
            "allergies": list(self.allergies),
        }


@dataclass(frozen=True)
class DraftExpense:
    date: str
    date_detected: bool
    amount: float
    description: str
    category: ExpenseCategory = ExpenseCategory.OTHER
    payment_method: PaymentMethod = PaymentMethod.CASH
    source_row: int | None = None

    @property
    def needs_review(self) -> bool:
        return not self.date_detected

    def to_record(self, record_id: str, created_at: str) -> dict[str, Any]:
        return {
            "id": record_id,
            "date": self.date,
            "amount": self.amount,
            "description": self.description,
            "category": self.category.value,
            "paymentMethod": self.payment_method.value,
        }


@dataclass(frozen=True)
class DraftRevenue:
    date: str
    date_detected: bool
    amount: float
    description: str
    patient_id: str = UNSPECIFIED_PATIENT_ID
    patient_name: str = UNSPECIFIED_PATIENT_NAME  # raw text, for display
    payment_method: PaymentMethod = PaymentMethod.CASH
    source_row: int | None = None

    @property
    def needs_review(self) -> bool:
        return not self.date_detected

    def to_record(self, record_id: str, created_at: str) -> dict[str, Any]:
        # Revenues are stored as paid invoices with a single line item
        return {
            "id": record_id,
            "patientId": self.patient_id,
            "date": self.date,
            "amount": self.amount,
            "status": "PAID",
            "paymentMethod": self.payment_method.value,
            "items": [{"description": self.description, "price": self.amount}],
        }


Draft = DraftPatient | DraftExpense | DraftRevenue
