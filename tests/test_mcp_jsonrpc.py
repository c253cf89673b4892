"""Tests for MCP JSON-RPC protocol handling."""

import asyncio
import json
from dataclasses import dataclass

import pytest

from typedmcp.mcp.errors import HANDLER_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND


@dataclass
class Greeting:
    name: str


class TestJsonRpcParsing:
    """Tests for JSON-RPC envelope parsing."""

    async def test_invalid_json_returns_invalid_params_with_null_id(self, transport):
        await transport.push(b"not valid json{")
        data = await transport.pop()

        assert data["jsonrpc"] == "2.0"
        assert data["id"] is None
        assert data["error"]["code"] == INVALID_PARAMS
        assert "invalid json" in data["error"]["message"].lower()

    async def test_missing_method_echoes_id(self, transport):
        await transport.push({"jsonrpc": "2.0", "id": 7})
        data = await transport.pop()

        assert data["id"] == 7
        assert data["error"]["code"] == INVALID_PARAMS

    async def test_wrong_jsonrpc_version_is_invalid(self, transport):
        await transport.push({"jsonrpc": "1.0", "id": 1, "method": "tools/list"})
        data = await transport.pop()

        assert data["error"]["code"] == INVALID_PARAMS

    async def test_non_object_message_is_invalid(self, transport):
        await transport.push(b"[1, 2, 3]")
        data = await transport.pop()

        assert data["id"] is None
        assert data["error"]["code"] == INVALID_PARAMS

    async def test_id_echoed_verbatim(self, rpc):
        data = await rpc("tools/list", id="req-abc")
        assert data["id"] == "req-abc"

        data = await rpc("tools/list", id=42)
        assert data["id"] == 42

    async def test_server_survives_bad_requests(self, transport, rpc):
        await transport.push(b"{{{")
        await transport.pop()
        await transport.push({"jsonrpc": "2.0", "id": 2, "method": "no/such"})
        await transport.pop()

        data = await rpc("tools/list", id=3)
        assert data["id"] == 3
        assert "result" in data


class TestMcpMethods:
    """Tests for MCP protocol methods."""

    async def test_unknown_method_returns_not_found(self, rpc):
        data = await rpc("unknown/method")

        assert data["error"]["code"] == METHOD_NOT_FOUND
        assert data["error"]["message"] == "method not found: unknown/method"

    async def test_initialize_returns_fixed_identity(self, rpc, settings):
        data = await rpc(
            "initialize",
            {
                "protocolVersion": "2025-03-26",
                "capabilities": {},
                "clientInfo": {"name": "test", "version": "1.0"},
            },
        )

        result = data["result"]
        assert result["protocolVersion"] == "2025-03-26"
        assert result["serverInfo"] == {
            "name": settings.server_name,
            "version": settings.server_version,
        }
        assert result["capabilities"]["tools"] == {"listChanged": False}
        assert result["capabilities"]["resources"] == {
            "listChanged": False,
            "subscribe": False,
        }

    async def test_initialize_ignores_registry_contents(self, rpc, registry):
        before = (await rpc("initialize", id=1))["result"]

        async def extra(req: Greeting) -> str:
            return req.name

        registry.register_tool("Extra", extra)
        after = (await rpc("initialize", id=2))["result"]

        assert before == after

    async def test_initialize_tolerates_missing_params(self, transport):
        await transport.push({"jsonrpc": "2.0", "id": 1, "method": "initialize"})
        data = await transport.pop()
        assert data["result"]["protocolVersion"] == "2025-03-26"

    async def test_tools_list_returns_registered_tools(self, rpc, registry):
        async def greet(req: Greeting) -> str:
            return f"hello {req.name}"

        registry.register_tool("Greet", greet)
        data = await rpc("tools/list")

        tools = {t["name"]: t for t in data["result"]["tools"]}
        assert set(tools) == {"Echo", "Greet"}
        assert tools["Echo"]["description"] == "echo a message"
        assert tools["Echo"]["inputSchema"] == {
            "type": "object",
            "properties": {"Msg": {"type": "string"}},
        }
        assert tools["Echo"]["outputSchema"] == tools["Echo"]["inputSchema"]
        assert tools["Greet"]["outputSchema"] == {"type": "string"}
        assert "description" not in tools["Greet"]

    async def test_tools_list_carries_schema_override(self, rpc, registry):
        async def greet(req: Greeting) -> str:
            return req.name

        override = {"type": "object", "properties": {"who": {"type": "string"}}}
        registry.register_tool("Greet", greet, input_schema=override)
        data = await rpc("tools/list")

        tools = {t["name"]: t for t in data["result"]["tools"]}
        assert tools["Greet"]["inputSchema"] == override

    async def test_notification_gets_no_response(self, transport, rpc):
        await transport.push({"jsonrpc": "2.0", "method": "notifications/initialized"})
        data = await rpc("tools/list", id=99)

        # The first reply on the wire belongs to the later request
        assert data["id"] == 99
        assert transport.notifications_acked == 1


class TestToolsCall:
    """Tests for tools/call."""

    async def test_echo_round_trip(self, rpc):
        data = await rpc("tools/call", {"name": "Echo", "arguments": {"Msg": "hi"}})

        result = data["result"]
        assert result["structuredContent"] == {"Msg": "hi"}
        assert result["content"][0]["type"] == "text"
        assert json.loads(result["content"][0]["text"]) == {"Msg": "hi"}

    async def test_unknown_tool_returns_not_found(self, rpc):
        data = await rpc("tools/call", {"name": "unknown-tool", "arguments": {}})

        assert data["error"]["code"] == METHOD_NOT_FOUND
        assert data["error"]["message"] == "method not found: unknown-tool"

    @pytest.mark.parametrize(
        "arguments",
        ["not an object", {"Msg": 5}, [1, 2], {"Other": "x"}],
    )
    async def test_invalid_arguments_return_invalid_params(self, rpc, arguments):
        data = await rpc("tools/call", {"name": "Echo", "arguments": arguments})

        assert data["error"]["code"] == INVALID_PARAMS

    async def test_missing_params_return_invalid_params(self, transport):
        await transport.push({"jsonrpc": "2.0", "id": 1, "method": "tools/call"})
        data = await transport.pop()

        assert data["error"]["code"] == INVALID_PARAMS

    async def test_handler_error_message_is_verbatim(self, rpc, registry):
        async def fail(req: Greeting) -> Greeting:
            raise RuntimeError("database unavailable")

        registry.register_tool("Fail", fail)
        data = await rpc("tools/call", {"name": "Fail", "arguments": {"name": "x"}})

        assert data["error"]["code"] == HANDLER_ERROR
        assert data["error"]["message"] == "database unavailable"

    async def test_empty_handler_error_message_is_kept(self, rpc, registry):
        async def fail(req: Greeting) -> Greeting:
            raise RuntimeError()

        registry.register_tool("Fail", fail)
        data = await rpc("tools/call", {"name": "Fail", "arguments": {"name": "x"}})

        assert data["error"]["code"] == HANDLER_ERROR
        assert data["error"]["message"] == ""

    async def test_tool_without_output_schema_returns_plain_text(self, rpc, registry):
        async def shout(req: Greeting):
            return req.name.upper()

        registry.register_tool("Shout", shout)
        data = await rpc("tools/call", {"name": "Shout", "arguments": {"name": "hey"}})

        result = data["result"]
        assert "structuredContent" not in result
        assert result["content"] == [{"type": "text", "text": "HEY"}]

    async def test_sync_handler_is_supported(self, rpc, registry):
        def count(req: list[int]) -> int:
            return len(req)

        registry.register_tool("Count", count)
        data = await rpc("tools/call", {"name": "Count", "arguments": [1, 2, 3]})

        assert data["result"]["structuredContent"] == 3

    async def test_reregistered_tool_uses_latest_handler(self, rpc, registry):
        async def first(req: Greeting) -> str:
            return "first"

        async def second(req: Greeting) -> str:
            return "second"

        registry.register_tool("Pick", first)
        registry.register_tool("Pick", second)
        data = await rpc("tools/call", {"name": "Pick", "arguments": {"name": "x"}})

        assert data["result"]["structuredContent"] == "second"

    async def test_concurrent_calls_each_get_one_response(self, transport, registry):
        async def slow_echo(req: Greeting) -> Greeting:
            # Later requests finish first
            await asyncio.sleep(0.001 * (50 - int(req.name)))
            return req

        registry.register_tool("SlowEcho", slow_echo)
        count = 50
        for i in range(count):
            await transport.push({
                "jsonrpc": "2.0",
                "id": i,
                "method": "tools/call",
                "params": {"name": "SlowEcho", "arguments": {"name": str(i)}},
            })

        responses = [await transport.pop() for _ in range(count)]

        ids = sorted(r["id"] for r in responses)
        assert ids == list(range(count))
        for r in responses:
            assert r["result"]["structuredContent"] == {"name": str(r["id"])}
        assert transport.outbound.empty()


class TestResources:
    """Tests for resources/list, resources/templates/list and resources/read."""

    async def test_resources_list(self, rpc):
        data = await rpc("resources/list")

        resources = data["result"]["resources"]
        assert len(resources) == 1
        assert resources[0]["name"] == "Res"
        assert resources[0]["uri"] == "res://{id}"
        assert resources[0]["jsonSchema"] == {
            "type": "object",
            "properties": {"ID": {"type": "integer"}},
        }

    async def test_resource_templates_list(self, rpc):
        data = await rpc("resources/templates/list")

        templates = data["result"]["resourceTemplates"]
        assert templates == [
            {
                "name": "Res",
                "uriTemplate": "res://{id}",
                "description": "resource by id",
                "mimeType": "application/json",
                "jsonSchema": {
                    "type": "object",
                    "properties": {"ID": {"type": "integer"}},
                },
            }
        ]

    async def test_read_parses_id_from_uri(self, rpc):
        data = await rpc("resources/read", {"uri": "res://42"})

        contents = data["result"]["contents"]
        assert len(contents) == 1
        assert contents[0]["uri"] == "res://42#json"
        assert contents[0]["mimeType"] == "application/json"
        assert json.loads(contents[0]["text"]) == {"ID": 42}

    async def test_concrete_resource_beats_template(self, rpc, registry):
        async def concrete(uri: str) -> str:
            return "concrete"

        registry.register_resource("Exact", "res://42", concrete)

        data = await rpc("resources/read", {"uri": "res://42"})
        assert json.loads(data["result"]["contents"][0]["text"]) == "concrete"

        data = await rpc("resources/read", {"uri": "res://7"})
        assert json.loads(data["result"]["contents"][0]["text"]) == {"ID": 7}

    async def test_read_accepts_meta_passthrough(self, rpc):
        data = await rpc("resources/read", {"uri": "res://1", "_meta": {"trace": "x"}})
        assert json.loads(data["result"]["contents"][0]["text"]) == {"ID": 1}

    @pytest.mark.parametrize("params", [{}, {"uri": ""}, {"uri": 12}])
    async def test_bad_uri_returns_invalid_params(self, rpc, params):
        data = await rpc("resources/read", params)
        assert data["error"]["code"] == INVALID_PARAMS

    async def test_unknown_uri_returns_not_found(self, rpc):
        data = await rpc("resources/read", {"uri": "other://1"})

        assert data["error"]["code"] == METHOD_NOT_FOUND
        assert "other://1" in data["error"]["message"]

    async def test_handler_error_returns_handler_error(self, rpc):
        data = await rpc("resources/read", {"uri": "res://abc"})

        assert data["error"]["code"] == HANDLER_ERROR
        assert "abc" in data["error"]["message"]


class TestResponseFormat:
    """Tests for JSON-RPC response format compliance."""

    async def test_success_response_has_result_only(self, rpc):
        data = await rpc("tools/list", id=42)

        assert data["jsonrpc"] == "2.0"
        assert data["id"] == 42
        assert "result" in data
        assert "error" not in data

    async def test_error_response_has_error_only(self, rpc):
        data = await rpc("unknown/method")

        assert "result" not in data
        assert isinstance(data["error"]["code"], int)
        assert isinstance(data["error"]["message"], str)
