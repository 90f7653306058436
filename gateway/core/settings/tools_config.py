"""Tool execution configuration."""

from pydantic import BaseModel, SecretStr


class ToolsConfig(BaseModel, frozen=True):
    """Server-level tool credentials and code execution limits.

    Server keys are only a fallback: a user's own keys from the settings
    store always take precedence.
    """

    firecrawl_api_key: SecretStr
    google_maps_api_key: SecretStr
    code_execution_enabled: bool
    code_execution_timeout: int
    code_execution_max_output: int
    code_execution_memory_mb: int

    def fallback_keys(self) -> dict[str, str]:
        """Non-empty server credentials keyed like the user settings store."""
        keys = {
            "firecrawl_api_key": self.firecrawl_api_key.get_secret_value(),
            "google_maps_api_key": self.google_maps_api_key.get_secret_value(),
        }
        return {name: value for name, value in keys.items() if value}
