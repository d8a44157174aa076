"""MCP server entrypoint for the choreography service."""
import os
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .server import ChoreoService


host = os.getenv("MCP_HOST", "127.0.0.1")
port = int(os.getenv("MCP_PORT", "8000"))
path = os.getenv("MCP_PATH", "/mcp").rstrip("/")
sse_path = f"{path}/sse"
message_path = f"{path}/messages/"

mcp = FastMCP(
    "mcp-choreo",
    json_response=True,
    host=host,
    port=port,
    sse_path=sse_path,
    message_path=message_path,
)
service = ChoreoService()


@mcp.tool()
def choreo_orchestrate(
    raw_text: str,
    roster: List[str],
    display_names: Optional[Dict[str, str]] = None,
    seed: Optional[int] = None,
) -> Dict[str, Any]:
    return service.choreo_orchestrate(raw_text=raw_text, roster=roster, display_names=display_names, seed=seed)


@mcp.tool()
def choreo_reconcile(
    scene: Dict[str, Any],
    durations_ms: Optional[Dict[str, float]] = None,
    seed: Optional[int] = None,
) -> Dict[str, Any]:
    return service.choreo_reconcile(scene=scene, durations_ms=durations_ms, seed=seed)


@mcp.tool()
def choreo_vocabulary() -> Dict[str, Any]:
    return service.choreo_vocabulary()


if __name__ == "__main__":
    transport = os.getenv("MCP_TRANSPORT", "stdio")
    mcp.run(transport=transport)
