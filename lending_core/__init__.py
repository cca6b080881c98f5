"""Single-market over-collateralized lending core."""
from .errors import LendingError
from .models import LendingPool, PositionHealth, UserPosition
from .services import LendingProtocol

__all__ = [
    "LendingError",
    "LendingPool",
    "LendingProtocol",
    "PositionHealth",
    "UserPosition",
]
