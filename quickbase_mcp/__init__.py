"""
QuickBase Personal MCP - SDK helper tools for an AI coding assistant.

Exposes code search across the local QuickBase JS, Go and spec
repositories, side-by-side feature comparison, and static reference
documents through the Model Context Protocol (MCP) over stdio.
"""

from .protocol import (
    MCPMessage,
    MCPRequest,
    MCPResponse,
    MCPError,
    MCPErrorCode,
    MCPProtocolError,
    Tool,
    ToolParameter,
    ToolResult,
)
from .repos import Repository, RepositorySet, resolve_repositories
from .collaborators import SearchBackend, RipgrepSearch, read_source_file
from .server import MCPServer, ServerConfig, create_server
from .tools import (
    ArgumentDecodeError,
    BaseTool,
    SearchCodeTool,
    CompareImplementationsTool,
    GetAuthExampleTool,
    ListFeaturesTool,
    CheckParityTool,
    ToolRegistry,
    create_registry,
)
from .transport import (
    Transport,
    StdioTransport,
)

__version__ = "1.0.0"

__all__ = [
    # Protocol
    "MCPMessage",
    "MCPRequest",
    "MCPResponse",
    "MCPError",
    "MCPErrorCode",
    "MCPProtocolError",
    "Tool",
    "ToolParameter",
    "ToolResult",
    # Repositories and collaborators
    "Repository",
    "RepositorySet",
    "resolve_repositories",
    "SearchBackend",
    "RipgrepSearch",
    "read_source_file",
    # Server
    "MCPServer",
    "ServerConfig",
    "create_server",
    # Tools
    "ArgumentDecodeError",
    "BaseTool",
    "SearchCodeTool",
    "CompareImplementationsTool",
    "GetAuthExampleTool",
    "ListFeaturesTool",
    "CheckParityTool",
    "ToolRegistry",
    "create_registry",
    # Transport
    "Transport",
    "StdioTransport",
]
