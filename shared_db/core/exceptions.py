# shared_db/core/exceptions.py
"""Errors reported by the schema store.

Every error is a rejected operation: nothing from the failed write is
committed.
"""


class SchemaStoreError(Exception):
    """Base exception for schema store errors."""
    pass


class UniquenessConflict(SchemaStoreError):
    """A unique column (email, order number) already holds the value."""
    pass


class ReferentialIntegrityViolation(SchemaStoreError):
    """A foreign key points nowhere, or a restricted child blocks a delete."""
    pass


class DomainViolation(SchemaStoreError):
    """A value outside its enum, a missing required field, a failed check."""
    pass


class PrecisionLoss(DomainViolation):
    """A decimal value does not fit its column's precision or scale."""
    pass


class NotFound(SchemaStoreError):
    pass
