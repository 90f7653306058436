"""Provider catalogue schemas."""

from typing import Literal

from pydantic import BaseModel


class ProviderInfo(BaseModel):
    """Public description of one upstream provider."""

    id: str
    label: str
    default_model: str
    auth_style: Literal["bearer", "x-api-key", "query"]
    supports_tools: bool
    requires_api_key: bool
