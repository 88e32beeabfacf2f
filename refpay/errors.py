"""
Exceptions raised by refpay.

Only registry mutations and input document loading can fail. Scoring,
matching and payroll computation degrade gracefully instead of raising.
"""

from typing import List, Optional


class RefpayError(Exception):
    """Base class for all refpay errors."""
    pass


class DuplicateKeyError(RefpayError):
    """Raised when an employee number is already used by another referee."""

    def __init__(self, employee_number: str):
        self.employee_number = employee_number
        super().__init__(f"Referee with ID {employee_number} already exists.")


class NotFoundError(RefpayError):
    """Raised when a referenced record does not exist."""

    def __init__(self, key: str, kind: str = "Referee"):
        self.key = key
        self.kind = kind
        super().__init__(f"{kind} with ID {key} not found.")


class InvalidDocumentError(RefpayError):
    """Raised when an input JSON document fails validation."""

    def __init__(self, source: str, errors: Optional[List[str]] = None):
        self.source = source
        self.errors = errors or []
        detail = "; ".join(self.errors) if self.errors else "unreadable document"
        super().__init__(f"Invalid document {source}: {detail}")
