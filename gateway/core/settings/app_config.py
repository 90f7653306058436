"""Application environment configuration."""

from typing import Literal

from pydantic import BaseModel


class AppConfig(BaseModel, frozen=True):
    """Environment name, debug flag and browser origins."""

    name: str
    env: Literal["development", "staging", "production"]
    debug: bool
    cors_origins: tuple[str, ...] = ()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def allowed_origins(self) -> list[str]:
        """Any origin in development, the configured list elsewhere."""
        if self.is_development:
            return ["*"]
        return list(self.cors_origins)
