"""Chat request schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ChatMessage(BaseModel):
    """Individual chat message."""

    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    """Chat API request schema.

    Field names follow the browser client (camelCase); snake_case is
    accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(default_factory=list)
    agent_id: str | None = Field(default=None, alias="agentId")
    agent_name: str | None = Field(default=None, alias="agentName", max_length=200)
    agent_tools: list[str] = Field(default_factory=list, alias="agentTools")
    provider: str | None = None
    model: str | None = Field(default=None, max_length=200)
    api_key: SecretStr | None = Field(default=None, alias="apiKey")
    user_id: str | None = Field(default=None, alias="userId")

    @property
    def caller_api_key(self) -> str:
        """The caller-supplied key, or an empty string."""
        return self.api_key.get_secret_value() if self.api_key else ""
