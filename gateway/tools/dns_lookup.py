"""DNS lookup tool using Cloudflare DNS over HTTPS."""

import json
from typing import Literal

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from gateway.core.exceptions import ToolExecutionError
from gateway.tools.context import ensure_ok, get_tool_context

DOH_URL = "https://cloudflare-dns.com/dns-query"

RecordType = Literal["A", "AAAA", "CNAME", "MX", "NS", "TXT", "SOA", "CAA", "SRV", "PTR"]

# DNS RR type numbers returned in answers
RECORD_TYPES = {
    1: "A",
    2: "NS",
    5: "CNAME",
    6: "SOA",
    12: "PTR",
    15: "MX",
    16: "TXT",
    28: "AAAA",
    33: "SRV",
    257: "CAA",
}

RESPONSE_CODES = {
    0: "NOERROR",
    1: "FORMERR",
    2: "SERVFAIL",
    3: "NXDOMAIN",
    4: "NOTIMP",
    5: "REFUSED",
}


@tool
async def dns_lookup(
    domain: str, config: RunnableConfig, record_type: RecordType = "A"
) -> str:
    """Look up DNS records (A, AAAA, CNAME, MX, NS, TXT, ...) for a domain."""
    context = get_tool_context(config)
    response = await context.http_client.get(
        DOH_URL,
        params={"name": domain, "type": record_type},
        headers={"Accept": "application/dns-json"},
        timeout=context.timeout,
    )
    ensure_ok(response, "DNS resolver")

    data = response.json()
    status = data.get("Status", 0)
    if status not in (0, 3):
        raise ToolExecutionError(
            f"DNS lookup failed: {RESPONSE_CODES.get(status, str(status))}"
        )
    return json.dumps(
        {
            "domain": domain,
            "record_type": record_type,
            "status": RESPONSE_CODES.get(status, str(status)),
            "answers": [
                {
                    "name": answer.get("name"),
                    "type": RECORD_TYPES.get(answer.get("type"), answer.get("type")),
                    "ttl": answer.get("TTL"),
                    "data": answer.get("data"),
                }
                for answer in data.get("Answer") or []
            ],
        }
    )
