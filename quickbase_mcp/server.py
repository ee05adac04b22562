"""
MCP Server implementation.

Routes JSON-RPC methods to handlers and wraps tool results in the MCP
response envelope. Requests are processed one at a time.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .collaborators import SearchBackend
from .protocol import (
    MCPRequest,
    MCPResponse,
    MCPError,
    MCPErrorCode,
    MCPProtocolError,
    parse_message,
)
from .repos import RepositorySet, resolve_repositories
from .tools import ToolRegistry, create_registry
from .transport import Transport, StdioTransport


logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    """Configuration for the MCP server."""
    name: str = "quickbase-personal-mcp"
    version: str = "1.0.0"
    protocol_version: str = "2024-11-05"
    repositories: RepositorySet = field(default_factory=resolve_repositories)


class MCPServer:
    """
    MCP Server that handles request routing and the main loop.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        registry: Optional[ToolRegistry] = None,
    ):
        self.config = config or ServerConfig()
        self.registry = registry if registry is not None else ToolRegistry()
        self._transport: Optional[Transport] = None
        self._running = False
        self._handlers: Dict[str, Callable] = {}

        self._register_default_handlers()

    def _register_default_handlers(self) -> None:
        """Register built-in MCP method handlers."""
        self._handlers["initialize"] = self._handle_initialize
        self._handlers["initialized"] = self._handle_initialized
        self._handlers["notifications/initialized"] = self._handle_initialized
        self._handlers["tools/list"] = self._handle_list_tools
        self._handlers["tools/call"] = self._handle_call_tool
        self._handlers["shutdown"] = self._handle_shutdown
        self._handlers["ping"] = self._handle_ping

    async def _handle_initialize(self, params: Optional[dict]) -> dict:
        """Handle initialize request."""
        client = (params or {}).get("clientInfo") or {}
        logger.info(f"Initialize from {client.get('name', 'unknown client')}")
        return {
            "protocolVersion": self.config.protocol_version,
            "capabilities": {
                "tools": {"listChanged": False},
            },
            "serverInfo": {
                "name": self.config.name,
                "version": self.config.version,
            },
        }

    async def _handle_initialized(self, params: Optional[dict]) -> dict:
        """Handle initialized notification."""
        logger.info("Client initialized")
        return {}

    async def _handle_list_tools(self, params: Optional[dict]) -> dict:
        """Handle tools/list request."""
        return {
            "tools": [t.to_dict() for t in self.registry.list_tools()],
        }

    async def _handle_call_tool(self, params: Optional[dict]) -> dict:
        """Handle tools/call request."""
        if not isinstance(params, dict):
            raise MCPProtocolError(MCPErrorCode.INVALID_PARAMS, "Missing parameters")

        name = params.get("name")
        if not name:
            raise MCPProtocolError(MCPErrorCode.INVALID_PARAMS, "Missing tool name")

        result = self.registry.execute(name, params.get("arguments"))
        if not result.success:
            logger.info(f"Tool {name} returned error: {result.error}")
        return result.to_mcp_content()

    async def _handle_shutdown(self, params: Optional[dict]) -> dict:
        """Handle shutdown request."""
        logger.info("Shutdown requested")
        self._running = False
        return {}

    async def _handle_ping(self, params: Optional[dict]) -> dict:
        """Handle ping request."""
        return {}

    async def process_request(self, request: MCPRequest) -> MCPResponse:
        """Process a single MCP request."""
        handler = self._handlers.get(request.method)

        if handler is None:
            error = MCPError.from_code(
                MCPErrorCode.METHOD_NOT_FOUND,
                f"Unknown method: {request.method}",
            )
            return MCPResponse.failure(request.id, error)

        try:
            result = await handler(request.params)
            return MCPResponse.success(request.id, result)
        except MCPProtocolError as e:
            return MCPResponse.failure(request.id, e.error)
        except Exception as e:
            logger.exception(f"Error processing {request.method}: {e}")
            error = MCPError.from_code(
                MCPErrorCode.INTERNAL_ERROR,
                str(e),
            )
            return MCPResponse.failure(request.id, error)

    async def handle_message(self, data: dict) -> Optional[dict]:
        """Handle an incoming message. Returns None when no reply is due."""
        request_id = data.get("id") if isinstance(data, dict) else None
        try:
            message = parse_message(data)
        except ValueError as e:
            logger.warning(f"Invalid request: {e}")
            error = MCPError.from_code(MCPErrorCode.INVALID_REQUEST, str(e))
            return MCPResponse.failure(request_id, error).to_dict()

        if not isinstance(message, MCPRequest):
            return None

        try:
            if message.is_notification:
                if message.method in self._handlers:
                    await self.process_request(message)
                else:
                    logger.debug(f"Ignoring notification {message.method}")
                return None

            response = await self.process_request(message)
            return response.to_dict()
        except Exception as e:
            logger.exception(f"Error handling message: {e}")
            if message.is_notification:
                return None
            error = MCPError.from_code(MCPErrorCode.INTERNAL_ERROR, str(e))
            return MCPResponse.failure(request_id, error).to_dict()

    async def run(self, transport: Optional[Transport] = None) -> None:
        """Run the server main loop until EOF or shutdown.

        Transport failures propagate to the caller.
        """
        self._transport = transport or StdioTransport()
        self._running = True

        logger.info(f"MCP Server {self.config.name} v{self.config.version} starting")

        try:
            async with self._transport:
                while self._running:
                    try:
                        message = await self._transport.receive()
                    except ValueError as e:
                        logger.error(f"Parse error: {e}")
                        error_response = MCPResponse.failure(
                            None,
                            MCPError.from_code(MCPErrorCode.PARSE_ERROR, str(e)),
                        )
                        await self._transport.send(error_response.to_dict())
                        continue

                    if message is None:
                        logger.info("EOF received, shutting down")
                        break

                    response = await self.handle_message(message)
                    if response is not None:
                        await self._transport.send(response)
        finally:
            self._running = False
            logger.info("Server stopped")


def create_server(
    config: Optional[ServerConfig] = None,
    searcher: Optional[SearchBackend] = None,
) -> MCPServer:
    """
    Create an MCP server with the SDK tools registered.

    Args:
        config: Server configuration
        searcher: Search backend override (defaults to ripgrep)

    Returns:
        Configured MCPServer instance
    """
    config = config or ServerConfig()
    registry = create_registry(config.repositories, searcher=searcher)
    return MCPServer(config, registry=registry)
