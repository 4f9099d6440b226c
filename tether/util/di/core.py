"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from tether.config import ProvisioningSettings, Settings
from tether.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Configuration provider.

    Settings are read once per container from the environment and .env file.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_provisioning_settings(self, settings: Settings) -> ProvisioningSettings:
        """Provide the configured reconciliation policy."""
        return settings.provisioning
