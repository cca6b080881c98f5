"""Service modules"""
from .lending_protocol import LendingProtocol
from .liquidation_engine import LiquidationEngine
from .pool_manager import PoolManager
from .position_manager import PositionManager
from .risk_engine import RiskEngine

__all__ = [
    "LendingProtocol",
    "LiquidationEngine",
    "PoolManager",
    "PositionManager",
    "RiskEngine",
]
