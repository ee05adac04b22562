"""
MCP Tools implementation.

The five SDK helper tools and the registry that decodes arguments and
dispatches calls to them.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .collaborators import RipgrepSearch, SearchBackend, read_source_file
from .knowledge import (
    AUTH_TYPES,
    CATEGORIES,
    FEATURE_MAP,
    FEATURES,
    FEATURES_DOCUMENT,
    LANGUAGES,
    PARITY_REPORT,
    REPO_SCOPES,
)
from .protocol import MCPErrorCode, MCPProtocolError, Tool, ToolParameter, ToolResult
from .repos import ALL_REPOS, RepositorySet


logger = logging.getLogger(__name__)

_JSON_TYPES = {
    "string": str,
    "boolean": bool,
    "object": dict,
    "array": list,
}


class ArgumentDecodeError(ValueError):
    """Tool arguments do not match the tool's parameter schema."""


class BaseTool(ABC):
    """Base class for MCP tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        pass

    @property
    @abstractmethod
    def parameters(self) -> List[ToolParameter]:
        """Tool parameters."""
        pass

    @abstractmethod
    def execute(self, **kwargs) -> ToolResult:
        """Execute the tool with decoded parameters."""
        pass

    def get_definition(self) -> Tool:
        """Get the MCP tool definition."""
        return Tool(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
        )

    def decode_arguments(self, arguments: Optional[Any]) -> Dict[str, Any]:
        """Decode a loosely typed argument bag into keyword arguments.

        Declared parameters are type checked and defaulted (an empty
        string counts as absent for parameters with a default); unknown
        keys are dropped. Enumerations are advertised to the client but not
        enforced here.

        Raises:
            ArgumentDecodeError: if the bag is not an object, a value has
                the wrong type, or a required parameter is missing.
        """
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ArgumentDecodeError(
                f"arguments must be an object, got {type(arguments).__name__}"
            )

        decoded = {}
        for param in self.parameters:
            value = arguments.get(param.name)
            if value == "" and param.default is not None:
                value = None
            if value is None:
                if param.required:
                    raise ArgumentDecodeError(f"missing required parameter '{param.name}'")
                if param.default is not None:
                    decoded[param.name] = param.default
                continue

            expected = _JSON_TYPES.get(param.type)
            if expected is not None and not isinstance(value, expected):
                raise ArgumentDecodeError(
                    f"parameter '{param.name}' must be a {param.type}, "
                    f"got {type(value).__name__}"
                )
            decoded[param.name] = value
        return decoded


class SearchCodeTool(BaseTool):
    """Search the local SDK repositories with ripgrep."""

    def __init__(self, repositories: RepositorySet, searcher: Optional[SearchBackend] = None):
        self.repositories = repositories
        self.searcher = searcher or RipgrepSearch()

    @property
    def name(self) -> str:
        return "search_code"

    @property
    def description(self) -> str:
        return "Search across your QuickBase SDK repositories (JS, Go, and spec)."

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="query",
                type="string",
                description="Search query (e.g., 'ticket auth', 'pagination', 'rate limit')",
                required=True,
            ),
            ToolParameter(
                name="repo",
                type="string",
                description="Limit to specific repo: 'js', 'go', 'spec', 'all' (default: 'all')",
                default=ALL_REPOS,
                enum=list(REPO_SCOPES),
            ),
        ]

    def execute(self, query: str, repo: str = ALL_REPOS) -> ToolResult:
        selected = self.repositories.select(repo)
        logger.info(f"search_code query={query!r} repos={[r.name for r in selected]}")

        sections = [f"Searching for: {query}\n\n"]
        for repository in selected:
            sections.append(f"## {repository.name}\n\n")
            output = self.searcher.search(query, repository.path)
            if output is None:
                sections.append("No matches found\n\n")
                continue
            sections.append(output)
            sections.append("\n")

        return ToolResult.text(
            "".join(sections),
            repositories=[r.name for r in selected],
        )


class CompareImplementationsTool(BaseTool):
    """Show the JS and Go source of one feature side by side."""

    def __init__(self, repositories: RepositorySet):
        self.repositories = repositories

    @property
    def name(self) -> str:
        return "compare_implementations"

    @property
    def description(self) -> str:
        return "Compare how a feature is implemented in JavaScript vs Go SDK."

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="feature",
                type="string",
                description="Feature to compare (e.g., 'ticket-auth', 'temp-token', 'pagination', 'retry')",
                required=True,
                enum=list(FEATURES),
            ),
        ]

    @staticmethod
    def _section(label: str, relative_path: str, fence: str, content: Optional[str]) -> str:
        if content is None:
            return f"## {label} ({relative_path})\nFile not found\n\n"
        return f"## {label} ({relative_path})\n\n```{fence}\n{content}\n```\n\n"

    def execute(self, feature: str) -> ToolResult:
        location = FEATURE_MAP.get(feature)
        if location is None:
            return ToolResult.failure(f"Unknown feature: {feature}")

        js_content = read_source_file(os.path.join(self.repositories.js.path, location.js_path))
        go_content = read_source_file(os.path.join(self.repositories.go.path, location.go_path))

        text = (
            f"# Comparing: {feature}\n\n"
            + self._section("JavaScript", location.js_path, "typescript", js_content)
            + self._section("Go", location.go_path, "go", go_content)
        )
        return ToolResult.text(
            text,
            feature=feature,
            js_found=js_content is not None,
            go_found=go_content is not None,
        )


class GetAuthExampleTool(BaseTool):
    """Authentication examples (placeholder until examples are collected)."""

    @property
    def name(self) -> str:
        return "get_auth_example"

    @property
    def description(self) -> str:
        return "Get authentication examples from your SDKs."

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="auth_type",
                type="string",
                description="Authentication type: 'user-token', 'temp-token', 'sso', 'ticket'",
                required=True,
                enum=list(AUTH_TYPES),
            ),
            ToolParameter(
                name="language",
                type="string",
                description="SDK language: 'js', 'go', 'both' (default: 'both')",
                default="both",
                enum=list(LANGUAGES),
            ),
        ]

    def execute(self, auth_type: str, language: str = "both") -> ToolResult:
        return ToolResult.text(
            f"Getting {auth_type} auth examples for: {language}\n\n"
            "TODO: Implement auth examples"
        )


class ListFeaturesTool(BaseTool):
    """List implemented SDK features.

    ``category`` is accepted for schema compatibility; the document is
    always returned in full.
    """

    @property
    def name(self) -> str:
        return "list_features"

    @property
    def description(self) -> str:
        return "List what features are implemented in your SDKs."

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="category",
                type="string",
                description="Feature category: 'auth', 'client', 'pagination', 'all' (default: 'all')",
                default="all",
                enum=list(CATEGORIES),
            ),
        ]

    def decode_arguments(self, arguments: Optional[Any]) -> Dict[str, Any]:
        try:
            return super().decode_arguments(arguments)
        except ArgumentDecodeError as e:
            logger.debug(f"list_features: {e}; using category 'all'")
            return {"category": "all"}

    def execute(self, category: str = "all") -> ToolResult:
        return ToolResult.text(FEATURES_DOCUMENT)


class CheckParityTool(BaseTool):
    """Report feature parity between the JS and Go SDKs."""

    @property
    def name(self) -> str:
        return "check_parity"

    @property
    def description(self) -> str:
        return "Check feature parity between JavaScript and Go SDKs."

    @property
    def parameters(self) -> List[ToolParameter]:
        return []

    def decode_arguments(self, arguments: Optional[Any]) -> Dict[str, Any]:
        return {}

    def execute(self) -> ToolResult:
        return ToolResult.text(PARITY_REPORT)


@dataclass
class ToolRegistry:
    """Registry for managing tools. Populated once at startup."""
    tools: Dict[str, BaseTool] = field(default_factory=dict)

    def register(self, tool: BaseTool) -> None:
        """Register a tool."""
        if tool.name in self.tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self.tools[tool.name] = tool

    def get(self, name: str) -> Optional[BaseTool]:
        """Get a tool by name."""
        return self.tools.get(name)

    def list_tools(self) -> List[Tool]:
        """List all registered tools as MCP Tool definitions, in registration order."""
        return [tool.get_definition() for tool in self.tools.values()]

    def execute(self, name: str, arguments: Optional[Any]) -> ToolResult:
        """Decode ``arguments`` for tool ``name`` and run it.

        Raises:
            MCPProtocolError: if no tool is registered under ``name``.
        """
        tool = self.get(name)
        if tool is None:
            raise MCPProtocolError(MCPErrorCode.INVALID_PARAMS, f"Tool not found: {name}")

        try:
            kwargs = tool.decode_arguments(arguments)
        except ArgumentDecodeError as e:
            logger.info(f"{name}: invalid parameters: {e}")
            return ToolResult.failure(f"Invalid parameters: {e}")

        return tool.execute(**kwargs)


def create_registry(
    repositories: RepositorySet,
    searcher: Optional[SearchBackend] = None,
) -> ToolRegistry:
    """Create a registry with the five SDK tools."""
    registry = ToolRegistry()
    registry.register(SearchCodeTool(repositories, searcher=searcher))
    registry.register(CompareImplementationsTool(repositories))
    registry.register(GetAuthExampleTool())
    registry.register(ListFeaturesTool())
    registry.register(CheckParityTool())
    return registry
