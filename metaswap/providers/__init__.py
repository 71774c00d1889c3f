"""Swap and bridge quoting provider adapters."""

from .base import SwapProvider
from .registry import PROVIDER_REGISTRY, ProviderRegistry, build_default_registry

__all__ = ["SwapProvider", "PROVIDER_REGISTRY", "ProviderRegistry", "build_default_registry"]
