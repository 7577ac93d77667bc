"""
Application Services Package

Architectural Intent:
- One service per step of the deployment protocol
- Services depend on ports only; adapters are injected by the composition root
"""

from henix.application.services.identifier_deriver import IdentifierDeriver
from henix.application.services.remote_store_layout import RemoteStoreLayout, resolve_slot
from henix.application.services.transfer_coordinator import TransferCoordinator
from henix.application.services.build_invoker import BuildInvoker

__all__ = [
    "IdentifierDeriver",
    "RemoteStoreLayout",
    "resolve_slot",
    "TransferCoordinator",
    "BuildInvoker",
]
