"""
MCP Protocol definitions.

JSON-RPC 2.0 message types plus the tool descriptor and tool result
shapes exchanged with the client.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class MCPErrorCode(Enum):
    """Standard JSON-RPC error codes used by MCP."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


@dataclass
class MCPError:
    """MCP Error object."""
    code: int
    message: str
    data: Optional[Any] = None

    @classmethod
    def from_code(cls, code: MCPErrorCode, message: str, data: Any = None) -> "MCPError":
        return cls(code=code.value, message=message, data=data)

    def to_dict(self) -> dict:
        result = {"code": self.code, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result


class MCPProtocolError(Exception):
    """Raised by method handlers to answer with a JSON-RPC error."""

    def __init__(self, code: MCPErrorCode, message: str, data: Any = None):
        super().__init__(message)
        self.error = MCPError.from_code(code, message, data)


@dataclass
class MCPMessage:
    """Base MCP message."""
    jsonrpc: str = "2.0"
    id: Optional[Union[str, int]] = None

    def to_dict(self) -> dict:
        result = {"jsonrpc": self.jsonrpc}
        if self.id is not None:
            result["id"] = self.id
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "MCPMessage":
        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            id=data.get("id"),
        )


@dataclass
class MCPRequest(MCPMessage):
    """MCP Request message. Requests without an id are notifications."""
    method: str = ""
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["method"] = self.method
        if self.params is not None:
            result["params"] = self.params
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "MCPRequest":
        method = data.get("method", "")
        if not isinstance(method, str):
            raise ValueError(f"Request method must be a string, got {type(method).__name__}")
        params = data.get("params")
        if params is not None and not isinstance(params, dict):
            raise ValueError(f"Request params must be an object, got {type(params).__name__}")
        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            id=data.get("id"),
            method=method,
            params=params,
        )


@dataclass
class MCPResponse(MCPMessage):
    """MCP Response message."""
    result: Optional[Any] = None
    error: Optional[MCPError] = None

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.error is not None:
            result["error"] = self.error.to_dict()
        else:
            result["result"] = self.result
        return result

    @classmethod
    def success(cls, id: Optional[Union[str, int]], result: Any) -> "MCPResponse":
        return cls(id=id, result=result)

    @classmethod
    def failure(cls, id: Optional[Union[str, int]], error: MCPError) -> "MCPResponse":
        return cls(id=id, error=error)


@dataclass(frozen=True)
class ToolParameter:
    """Tool parameter definition."""
    name: str
    type: str
    description: str
    required: bool = False
    default: Optional[Any] = None
    enum: Optional[List[Any]] = None

    def to_json_schema(self) -> dict:
        """Convert to JSON schema property."""
        schema = {
            "type": self.type,
            "description": self.description,
        }
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class Tool:
    """Tool definition for MCP."""
    name: str
    description: str
    parameters: List[ToolParameter] = field(default_factory=list)

    @property
    def required(self) -> List[str]:
        return [p.name for p in self.parameters if p.required]

    def to_dict(self) -> dict:
        """Convert to MCP tool definition format."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": {
                "type": "object",
                "properties": {p.name: p.to_json_schema() for p in self.parameters},
                "required": self.required,
            },
        }


@dataclass
class ToolResult:
    """Result from tool execution.

    A result carries either text content (success) or an error message,
    never neither.
    """
    success: bool
    content: str = ""
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.success and not self.content:
            raise ValueError("Successful tool result requires content")
        if not self.success and not self.error:
            raise ValueError("Failed tool result requires an error message")

    @classmethod
    def text(cls, content: str, **metadata: Any) -> "ToolResult":
        return cls(success=True, content=content, metadata=metadata)

    @classmethod
    def failure(cls, error: str, **metadata: Any) -> "ToolResult":
        return cls(success=False, error=error, metadata=metadata)

    def to_mcp_content(self) -> dict:
        """Wrap the result in the MCP tools/call result envelope."""
        text = self.content if self.success else self.error
        return {
            "content": [{"type": "text", "text": text}],
            "isError": not self.success,
        }


def parse_message(data: Union[str, dict]) -> MCPMessage:
    """Parse a raw message into an MCP message object."""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object")

    if "method" in data:
        return MCPRequest.from_dict(data)
    elif "result" in data or "error" in data:
        return MCPResponse.from_dict(data)
    else:
        return MCPMessage.from_dict(data)
