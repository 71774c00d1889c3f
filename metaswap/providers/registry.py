from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from ..config import Settings, settings as default_settings
from ..core.models import ProviderId
from .base import SwapProvider
from .kyberswap import KyberSwapProvider
from .lifi import LifiProvider
from .one_inch import OneInchProvider
from .paraswap import ParaSwapProvider
from .sifi import SifiProvider
from .socket import SocketProvider
from .squid import SquidProvider
from .unizen import UnizenProvider
from .zero_x import ZeroXProvider


# Registry of available swap/bridge providers
PROVIDER_REGISTRY: Dict[ProviderId, Type[SwapProvider]] = {
    ProviderId.LIFI: LifiProvider,
    ProviderId.SQUID: SquidProvider,
    ProviderId.SOCKET: SocketProvider,
    ProviderId.KYBERSWAP: KyberSwapProvider,
    ProviderId.ONE_INCH: OneInchProvider,
    ProviderId.ZERO_X: ZeroXProvider,
    ProviderId.PARASWAP: ParaSwapProvider,
    ProviderId.SIFI: SifiProvider,
    ProviderId.UNIZEN: UnizenProvider,
}

PROVIDER_DISPLAY_NAMES: Dict[ProviderId, str] = {
    ProviderId.LIFI: "Li.Fi",
    ProviderId.SQUID: "Squid",
    ProviderId.SOCKET: "Socket (Bungee)",
    ProviderId.KYBERSWAP: "KyberSwap",
    ProviderId.ONE_INCH: "1inch",
    ProviderId.ZERO_X: "0x",
    ProviderId.PARASWAP: "ParaSwap",
    ProviderId.SIFI: "Sifi",
    ProviderId.UNIZEN: "Unizen",
}


class ProviderRegistry:
    """Adapter instances keyed by ProviderId.

    Instances are shared across requests; adapters hold no per-request state.
    """

    def __init__(self, providers: Optional[Iterable[SwapProvider]] = None) -> None:
        self._providers: Dict[ProviderId, SwapProvider] = {}
        for provider in providers or ():
            self.register(provider)

    def register(self, provider: SwapProvider) -> None:
        self._providers[provider.provider_id] = provider

    def get(self, provider_id: ProviderId) -> Optional[SwapProvider]:
        return self._providers.get(provider_id)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __iter__(self):
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)

    @property
    def ids(self) -> List[ProviderId]:
        return list(self._providers)

    def router_by_chain_id(self, provider_id: ProviderId) -> Mapping[int, str]:
        provider = self.get(provider_id)
        if provider is None:
            raise KeyError(provider_id)
        return provider.router_by_chain_id

    def describe(self) -> Dict[str, Dict[str, Any]]:
        return {
            provider.name: {
                **provider.describe(),
                "display_name": PROVIDER_DISPLAY_NAMES.get(provider.provider_id, provider.name),
            }
            for provider in self
        }


def build_default_registry(
    settings: Optional[Settings] = None,
    **provider_kwargs: Any,
) -> ProviderRegistry:
    """Instantiate every known adapter against the given settings.

    ``provider_kwargs`` (e.g. ``transport=``) are forwarded to every adapter.
    """

    active = settings or default_settings
    return ProviderRegistry(
        provider_class(settings=active, **provider_kwargs)
        for provider_class in PROVIDER_REGISTRY.values()
    )
