"""Asset service layer exports"""
from .identifier_service import IdentifierService
from .registry_service import AssetRegistry
from .transfer_service import TransferWorkflow

__all__ = [
    'IdentifierService',
    'AssetRegistry',
    'TransferWorkflow',
]
