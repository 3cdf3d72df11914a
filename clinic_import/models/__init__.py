"""Domain models for the clinic spreadsheet importer.

This package contains the draft records, configuration dataclasses and
result/error models used throughout the application.
"""

from .config_models import DatabaseConfig, ImportConfig, StoreConfig
from .drafts import (
    DraftExpense,
    DraftPatient,
    DraftRevenue,
    ExpenseCategory,
    ImportKind,
    InsuranceType,
    PaymentMethod,
)
from .error_record import ErrorRecord
from .import_result import CommitResult, MappingResult
from .row_data import RowData

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    "StoreConfig",
    # Drafts
    "DraftExpense",
    "DraftPatient",
    "DraftRevenue",
    "ExpenseCategory",
    "ImportKind",
    "InsuranceType",
    "PaymentMethod",
    # Processing models
    "CommitResult",
    "ErrorRecord",
    "MappingResult",
    "RowData",
]
