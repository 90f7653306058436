"""Google Maps geocoding and directions tools."""

import json
import re
from typing import Any, Literal

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from gateway.core.exceptions import ToolExecutionError
from gateway.tools.context import ToolContext, ensure_ok, get_tool_context

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"
MAX_STEPS = 7

_HTML_TAG = re.compile(r"<[^>]*>")


async def _maps_get(context: ToolContext, url: str, params: dict[str, str]) -> dict[str, Any]:
    api_key = context.require_key("google_maps_api_key", "Google Maps API key")
    response = await context.http_client.get(
        url, params={**params, "key": api_key}, timeout=context.timeout
    )
    ensure_ok(response, "Google Maps")
    data = response.json()
    status = data.get("status", "OK")
    if status not in ("OK", "ZERO_RESULTS"):
        detail = data.get("error_message") or status
        raise ToolExecutionError(f"Google Maps error: {detail}")
    return data


@tool
async def geocode_address(address: str, config: RunnableConfig) -> str:
    """Convert a street address or place name to latitude/longitude coordinates."""
    context = get_tool_context(config)
    data = await _maps_get(context, GEOCODE_URL, {"address": address})

    results = data.get("results") or []
    if not results:
        return json.dumps({"address": address, "found": False})
    first = results[0]
    return json.dumps(
        {
            "address": address,
            "found": True,
            "formatted_address": first.get("formatted_address"),
            "location": (first.get("geometry") or {}).get("location"),
            "place_id": first.get("place_id"),
        },
        ensure_ascii=False,
    )


@tool
async def get_directions(
    origin: str,
    destination: str,
    config: RunnableConfig,
    mode: Literal["driving", "walking", "bicycling", "transit"] = "driving",
) -> str:
    """Get directions between two locations with distance, duration and steps."""
    context = get_tool_context(config)
    data = await _maps_get(
        context,
        DIRECTIONS_URL,
        {"origin": origin, "destination": destination, "mode": mode},
    )

    routes = data.get("routes") or []
    legs = routes[0].get("legs") if routes else None
    if not legs:
        return json.dumps({"origin": origin, "destination": destination, "found": False})

    leg = legs[0]
    steps = leg.get("steps") or []
    return json.dumps(
        {
            "found": True,
            "origin": leg.get("start_address") or origin,
            "destination": leg.get("end_address") or destination,
            "mode": mode,
            "distance": (leg.get("distance") or {}).get("text"),
            "duration": (leg.get("duration") or {}).get("text"),
            "steps": [
                {
                    "instruction": _HTML_TAG.sub("", step.get("html_instructions", "")),
                    "distance": (step.get("distance") or {}).get("text"),
                }
                for step in steps[:MAX_STEPS]
            ],
            "remaining_steps": max(0, len(steps) - MAX_STEPS),
        },
        ensure_ascii=False,
    )
