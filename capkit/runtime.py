"""Builds core components from a ConfigManager."""
from __future__ import annotations

import logging
from typing import Optional

from .configs import ConfigManager
from .core import CapabilityRegistry, SubstitutabilityChecker, TraceSink

logger = logging.getLogger(__name__)


def build_registry(config: ConfigManager) -> CapabilityRegistry:
    registry = CapabilityRegistry(config.get("registry.name", "default"))
    logger.info(f"Capability registry '{registry.name}' created")
    return registry


def build_checker(config: ConfigManager) -> SubstitutabilityChecker:
    return SubstitutabilityChecker(states=config.get("checker.states") or None)


def build_trace_sink(config: ConfigManager) -> Optional[TraceSink]:
    if not config.get("trace.enabled", False):
        return None
    return TraceSink(config.get("trace.path", "./trace/capkit.jsonl"))
