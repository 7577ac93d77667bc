"""
Domain Events Package

Architectural Intent:
- Base class for events raised by aggregates
- Concrete attempt events live next to DeploymentAttempt
"""

from henix.domain.events.event_base import DomainEvent

__all__ = ["DomainEvent"]
