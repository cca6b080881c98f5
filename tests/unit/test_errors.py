"""Unit tests for the error taxonomy."""
from __future__ import annotations

import pytest

from lending_core.errors import (
    BorrowTooLargeError,
    InsufficientCollateralError,
    InvalidTreasuryError,
    LendingError,
    LiquidationAmountTooLargeError,
    NumericalOverflowError,
    PositionNotLiquidatableError,
    RepayAmountTooLargeError,
    UnauthorizedAccessError,
)

TAXONOMY = [
    (NumericalOverflowError, 6000, "NumericalOverflow"),
    (BorrowTooLargeError, 6001, "BorrowTooLarge"),
    (InsufficientCollateralError, 6002, "InsufficientCollateral"),
    (UnauthorizedAccessError, 6003, "UnauthorizedAccess"),
    (RepayAmountTooLargeError, 6004, "RepayAmountTooLarge"),
    (InvalidTreasuryError, 6005, "InvalidTreasury"),
    (PositionNotLiquidatableError, 6006, "PositionNotLiquidatable"),
    (LiquidationAmountTooLargeError, 6007, "LiquidationAmountTooLarge"),
]


class TestTaxonomy:
    @pytest.mark.parametrize("error_cls,code,name", TAXONOMY)
    def test_codes_and_names(
        self, error_cls: type[LendingError], code: int, name: str
    ) -> None:
        err = error_cls()
        assert isinstance(err, LendingError)
        assert err.code == code
        assert err.name == name

    def test_message_without_detail(self) -> None:
        assert str(BorrowTooLargeError()) == "Borrow amount exceeds maximum allowed"

    def test_message_with_detail(self) -> None:
        err = RepayAmountTooLargeError("repaying 5, owed 3")
        assert str(err) == "Repay amount exceeds borrowed amount: repaying 5, owed 3"
        assert err.detail == "repaying 5, owed 3"
