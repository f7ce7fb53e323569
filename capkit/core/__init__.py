"""
Capability core: contracts, entities, registry, single-capability clients and
the substitutability checker.
"""
from .capability import Capability, Operation, kind_key, non_empty
from .client import CapabilityChannel, CapabilityClient
from .entity import CapabilityHandle, Entity, provides
from .errors import (
    CapabilityInvocationFailure,
    CapkitError,
    SubstitutabilityError,
    UnsupportedCapability,
)
from .registry import CapabilityRegistry, Delivery, NotificationReport
from .substitutability import SubstitutabilityChecker, SubstitutabilityReport, Violation
from .trace import TraceSink

__all__ = [
    "Capability",
    "Operation",
    "kind_key",
    "non_empty",
    "CapabilityChannel",
    "CapabilityClient",
    "CapabilityHandle",
    "Entity",
    "provides",
    "CapabilityInvocationFailure",
    "CapkitError",
    "SubstitutabilityError",
    "UnsupportedCapability",
    "CapabilityRegistry",
    "Delivery",
    "NotificationReport",
    "SubstitutabilityChecker",
    "SubstitutabilityReport",
    "Violation",
    "TraceSink",
]
