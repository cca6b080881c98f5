"""Protocol interfaces for the lending core's external collaborators."""
from .store import AccountStore
from .transfer_gateway import TransferGateway

__all__ = ["AccountStore", "TransferGateway"]
