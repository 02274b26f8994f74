"""
Error kinds raised by the attendance engine.

Storage exceptions never leave the engine as-is: each component catches
django.db.DatabaseError at its boundary and raises one of these instead.
An unknown or expired token is not an exception; it is reported through
RedemptionResult.
"""


class AttendanceError(Exception):
    """Base class for attendance engine errors."""
    reason = 'error'
    retryable = False


class TransientStoreError(AttendanceError):
    """The database could not be reached or timed out. Safe for the caller to retry."""
    reason = 'transient'
    retryable = True


class RedemptionConflict(AttendanceError):
    """A concurrent redemption flipped the token first."""
    reason = 'conflict'
