"""Built-in AI gateway configuration."""

from pydantic import BaseModel, SecretStr


class GatewayConfig(BaseModel, frozen=True):
    """Credentials and defaults of the built-in (keyless for callers) provider."""

    api_key: SecretStr
    default_model: str

    @property
    def is_configured(self) -> bool:
        """Check if the server-side gateway key is present."""
        return bool(self.api_key.get_secret_value())
