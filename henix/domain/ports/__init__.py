"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from henix.domain.ports.content_hasher_port import ContentHasherPort
from henix.domain.ports.file_transport_port import FileTransportPort
from henix.domain.ports.remote_executor_port import RemoteExecutorPort
from henix.domain.ports.build_backend_port import BuildBackendPort
from henix.domain.ports.deploy_config_port import DeployConfigPort
from henix.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "ContentHasherPort",
    "FileTransportPort",
    "RemoteExecutorPort",
    "BuildBackendPort",
    "DeployConfigPort",
    "EventBusPort",
]
