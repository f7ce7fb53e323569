"""
capkit: capability-segregated entities, registries and clients.
"""
from .core import (
    Capability,
    CapabilityClient,
    CapabilityHandle,
    CapabilityInvocationFailure,
    CapabilityRegistry,
    Entity,
    NotificationReport,
    Operation,
    SubstitutabilityChecker,
    UnsupportedCapability,
    provides,
)

__version__ = "0.1.0"

__all__ = [
    "Capability",
    "CapabilityClient",
    "CapabilityHandle",
    "CapabilityInvocationFailure",
    "CapabilityRegistry",
    "Entity",
    "NotificationReport",
    "Operation",
    "SubstitutabilityChecker",
    "UnsupportedCapability",
    "provides",
]
