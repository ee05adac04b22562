"""Tests for quickbase_mcp.server module."""

import io
import json

import pytest

from quickbase_mcp.collaborators import SearchBackend
from quickbase_mcp.protocol import MCPRequest, MCPErrorCode
from quickbase_mcp.repos import resolve_repositories
from quickbase_mcp.server import MCPServer, ServerConfig, create_server
from quickbase_mcp.transport import StdioTransport


class NoMatchSearch(SearchBackend):
    def search(self, query, path):
        return None


def make_server():
    config = ServerConfig(repositories=resolve_repositories(home="/home/dev"))
    return create_server(config, searcher=NoMatchSearch())


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig()
        assert config.name == "quickbase-personal-mcp"
        assert config.version == "1.0.0"
        assert len(config.repositories) == 3


class TestMCPServer:
    def test_create(self):
        server = MCPServer()
        assert server.config is not None
        assert server.registry is not None

    @pytest.mark.asyncio
    async def test_handle_initialize(self):
        server = make_server()
        request = MCPRequest(id="1", method="initialize", params={"clientInfo": {"name": "test"}})
        response = await server.process_request(request)

        assert response.error is None
        assert response.result["protocolVersion"] == "2024-11-05"
        assert response.result["capabilities"] == {"tools": {"listChanged": False}}
        assert response.result["serverInfo"]["name"] == "quickbase-personal-mcp"

    @pytest.mark.asyncio
    async def test_handle_ping(self):
        response = await make_server().process_request(MCPRequest(id="1", method="ping"))
        assert response.error is None
        assert response.result == {}

    @pytest.mark.asyncio
    async def test_list_tools_advertises_five_schemas(self):
        response = await make_server().process_request(MCPRequest(id="1", method="tools/list"))
        tools = {t["name"]: t["inputSchema"] for t in response.result["tools"]}

        assert list(tools) == [
            "search_code",
            "compare_implementations",
            "get_auth_example",
            "list_features",
            "check_parity",
        ]
        assert tools["search_code"]["required"] == ["query"]
        assert tools["search_code"]["properties"]["repo"]["enum"] == ["js", "go", "spec", "all"]
        assert tools["compare_implementations"]["required"] == ["feature"]
        assert tools["get_auth_example"]["required"] == ["auth_type"]
        assert tools["get_auth_example"]["properties"]["auth_type"]["enum"] == [
            "user-token", "temp-token", "sso", "ticket",
        ]
        assert tools["get_auth_example"]["properties"]["language"]["enum"] == ["js", "go", "both"]
        assert tools["list_features"]["required"] == []
        assert tools["list_features"]["properties"]["category"]["enum"] == [
            "auth", "client", "pagination", "all",
        ]
        assert tools["check_parity"]["properties"] == {}

    @pytest.mark.asyncio
    async def test_call_tool(self):
        request = MCPRequest(
            id="1",
            method="tools/call",
            params={"name": "search_code", "arguments": {"query": "ticket", "repo": "spec"}},
        )
        response = await make_server().process_request(request)

        assert response.error is None
        assert response.result["isError"] is False
        assert response.result["content"][0]["text"] == (
            "Searching for: ticket\n\n## quickbase-spec\n\nNo matches found\n\n"
        )

    @pytest.mark.asyncio
    async def test_call_tool_invalid_parameters(self):
        request = MCPRequest(
            id="1",
            method="tools/call",
            params={"name": "compare_implementations", "arguments": {"feature": 3}},
        )
        response = await make_server().process_request(request)

        assert response.error is None
        assert response.result["isError"] is True
        assert response.result["content"][0]["text"].startswith("Invalid parameters: ")

    @pytest.mark.asyncio
    async def test_call_tool_unknown_feature(self):
        request = MCPRequest(
            id="1",
            method="tools/call",
            params={"name": "compare_implementations", "arguments": {"feature": "graphql"}},
        )
        response = await make_server().process_request(request)
        assert response.result["isError"] is True
        assert response.result["content"][0]["text"] == "Unknown feature: graphql"

    @pytest.mark.asyncio
    async def test_call_tool_missing_name(self):
        request = MCPRequest(id="1", method="tools/call", params={"arguments": {}})
        response = await make_server().process_request(request)
        assert response.error.code == MCPErrorCode.INVALID_PARAMS.value

    @pytest.mark.asyncio
    async def test_call_tool_missing_params(self):
        response = await make_server().process_request(MCPRequest(id="1", method="tools/call"))
        assert response.error.code == MCPErrorCode.INVALID_PARAMS.value

    @pytest.mark.asyncio
    async def test_call_tool_not_found(self):
        request = MCPRequest(
            id="1",
            method="tools/call",
            params={"name": "nonexistent", "arguments": {}},
        )
        response = await make_server().process_request(request)
        assert response.error.code == MCPErrorCode.INVALID_PARAMS.value
        assert "nonexistent" in response.error.message

    @pytest.mark.asyncio
    async def test_handler_exception_is_internal_error(self):
        server = make_server()

        async def broken(params):
            raise RuntimeError("boom")

        server._handlers["tools/list"] = broken
        response = await server.process_request(MCPRequest(id="1", method="tools/list"))
        assert response.error.code == MCPErrorCode.INTERNAL_ERROR.value

    @pytest.mark.asyncio
    async def test_handle_unknown_method(self):
        response = await make_server().process_request(MCPRequest(id="1", method="resources/list"))
        assert response.error.code == MCPErrorCode.METHOD_NOT_FOUND.value

    @pytest.mark.asyncio
    async def test_handle_shutdown(self):
        server = make_server()
        server._running = True
        response = await server.process_request(MCPRequest(id="1", method="shutdown"))
        assert response.error is None
        assert server._running is False

    @pytest.mark.asyncio
    async def test_notification_gets_no_reply(self):
        server = make_server()
        message = {"jsonrpc": "2.0", "method": "notifications/initialized"}
        assert await server.handle_message(message) is None

    @pytest.mark.asyncio
    async def test_unknown_notification_ignored(self):
        server = make_server()
        assert await server.handle_message({"jsonrpc": "2.0", "method": "notifications/cancelled"}) is None

    @pytest.mark.asyncio
    async def test_handle_message(self):
        response = await make_server().handle_message({"jsonrpc": "2.0", "id": 3, "method": "ping"})
        assert response == {"jsonrpc": "2.0", "id": 3, "result": {}}

    @pytest.mark.asyncio
    async def test_non_string_method_is_invalid_request(self):
        response = await make_server().handle_message({"jsonrpc": "2.0", "id": 4, "method": []})
        assert response["id"] == 4
        assert response["error"]["code"] == MCPErrorCode.INVALID_REQUEST.value

    @pytest.mark.asyncio
    async def test_unexpected_dispatch_error_is_internal_error(self, monkeypatch):
        server = make_server()

        async def explode(request):
            raise TypeError("unhashable type")

        monkeypatch.setattr(server, "process_request", explode)
        response = await server.handle_message({"jsonrpc": "2.0", "id": 5, "method": "ping"})
        assert response["id"] == 5
        assert response["error"]["code"] == MCPErrorCode.INTERNAL_ERROR.value

    @pytest.mark.asyncio
    async def test_static_tools_are_stable(self):
        server = make_server()
        texts = []
        for arguments in ({}, {"category": "client"}, {"category": 1}):
            request = MCPRequest(
                id="1",
                method="tools/call",
                params={"name": "list_features", "arguments": arguments},
            )
            texts.append((await server.process_request(request)).result["content"][0]["text"])
        assert len(set(texts)) == 1


class TestServerLoop:
    @pytest.mark.asyncio
    async def test_run_session(self):
        lines = [
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
            {"jsonrpc": "2.0", "id": 3, "method": "tools/call",
             "params": {"name": "check_parity", "arguments": {}}},
        ]
        input_stream = io.StringIO("".join(json.dumps(m) + "\n" for m in lines) + "not json\n")
        output_stream = io.StringIO()

        await make_server().run(StdioTransport(input_stream, output_stream))

        replies = [json.loads(line) for line in output_stream.getvalue().splitlines()]
        assert [r.get("id") for r in replies] == [1, 2, 3, None]
        assert len(replies[1]["result"]["tools"]) == 5
        assert "Feature Parity Check" in replies[2]["result"]["content"][0]["text"]
        assert replies[3]["error"]["code"] == MCPErrorCode.PARSE_ERROR.value

    @pytest.mark.asyncio
    async def test_shutdown_stops_loop(self):
        input_stream = io.StringIO(
            json.dumps({"jsonrpc": "2.0", "id": 1, "method": "shutdown"}) + "\n"
            + json.dumps({"jsonrpc": "2.0", "id": 2, "method": "ping"}) + "\n"
        )
        output_stream = io.StringIO()

        await make_server().run(StdioTransport(input_stream, output_stream))

        replies = output_stream.getvalue().splitlines()
        assert len(replies) == 1

    @pytest.mark.asyncio
    async def test_malformed_request_does_not_stop_loop(self):
        input_stream = io.StringIO(
            '{"jsonrpc": "2.0", "id": 1, "method": []}\n'
            '{"jsonrpc": "2.0", "id": 2, "method": "ping"}\n'
        )
        output_stream = io.StringIO()

        await make_server().run(StdioTransport(input_stream, output_stream))

        replies = [json.loads(line) for line in output_stream.getvalue().splitlines()]
        assert [r["id"] for r in replies] == [1, 2]
        assert replies[0]["error"]["code"] == MCPErrorCode.INVALID_REQUEST.value
        assert replies[1]["result"] == {}
