"""Error taxonomy for the lending core.

Every error aborts the whole operation with no state change. Codes follow
the on-chain numbering so clients can map them back to messages.
"""
from __future__ import annotations


class LendingError(Exception):
    """Base class for every rejection raised by the lending core."""

    code: int = 0
    message: str = "Lending operation rejected"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)

    @property
    def name(self) -> str:
        return type(self).__name__.removesuffix("Error")


class NumericalOverflowError(LendingError):
    code = 6000
    message = "Numerical overflow occurred"


class BorrowTooLargeError(LendingError):
    code = 6001
    message = "Borrow amount exceeds maximum allowed"


class InsufficientCollateralError(LendingError):
    code = 6002
    message = "Insufficient collateral"


class UnauthorizedAccessError(LendingError):
    """Declared for compatibility; no operation raises it."""

    code = 6003
    message = "Unauthorized access"


class RepayAmountTooLargeError(LendingError):
    code = 6004
    message = "Repay amount exceeds borrowed amount"


class InvalidTreasuryError(LendingError):
    code = 6005
    message = "The treasury provided doesn't match the one in the lending pool"


class PositionNotLiquidatableError(LendingError):
    code = 6006
    message = "Position is not liquidatable"


class LiquidationAmountTooLargeError(LendingError):
    code = 6007
    message = "Liquidation amount is too large"


# ---------------------------------------------------------------------------
# Host-level errors raised by the storage and transfer seams
# ---------------------------------------------------------------------------


class AccountNotInitializedError(LendingError):
    code = 3012
    message = "The account was not initialized"


class AccountAlreadyInitializedError(LendingError):
    code = 3013
    message = "The account is already initialized"


class ConstraintViolationError(LendingError):
    code = 2003
    message = "An account constraint was violated"


class TransferFailedError(LendingError):
    code = 4000
    message = "Token transfer failed"
