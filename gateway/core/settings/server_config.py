"""Server configuration."""

from typing import Literal

from pydantic import BaseModel


class ServerConfig(BaseModel, frozen=True):
    """Bind address and uvicorn options."""

    host: str
    port: int
    log_level: Literal["critical", "error", "warning", "info", "debug"] = "info"
