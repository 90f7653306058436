"""Read-only catalogue of providers and tools."""

from fastapi import APIRouter

from gateway.providers.registry import PROVIDERS
from gateway.schemas.provider_schema import ProviderInfo
from gateway.schemas.response_schema import ApiResponse, success_response
from gateway.schemas.tool_schema import ToolCatalog
from gateway.tools.registry import tool_catalog

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/providers", response_model=ApiResponse[list[ProviderInfo]])
async def list_providers() -> dict:
    """List the selectable providers."""
    return success_response(
        [
            ProviderInfo.model_validate(a.descriptor, from_attributes=True)
            for a in PROVIDERS.values()
        ]
    )


@router.get("/tools", response_model=ApiResponse[ToolCatalog])
async def list_tools() -> dict:
    """List tool schemas and the capability labels that grant them."""
    return success_response(tool_catalog())
