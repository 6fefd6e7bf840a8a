"""Tests for the stdio transport and the server run loop."""

import io
import json

import pytest

from mcp_stdio_server.features.tools import Tool
from mcp_stdio_server.protocol.lifecycle import ServerError, ServerState
from mcp_stdio_server.protocol.transport import MessageDecodeError, StdioTransport
from mcp_stdio_server.traffic import TrafficLogger
from tests.conftest import make_echo_tool, notification, request


def run_session(server, *lines):
    """Feed lines through the run loop and return decoded output lines."""
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    server.start(transport=StdioTransport(stdin=stdin, stdout=stdout))
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


class TestStdioTransport:
    """Tests for StdioTransport."""

    def test_reads_message_from_stdin(self):
        """Should read a line from stdin."""
        transport = StdioTransport(stdin=io.StringIO('{"jsonrpc": "2.0"}\n'), stdout=io.StringIO())

        assert transport.read_message() == '{"jsonrpc": "2.0"}'

    def test_skips_empty_lines(self):
        """Should skip blank lines."""
        transport = StdioTransport(stdin=io.StringIO("\n  \n\nmsg\n"), stdout=io.StringIO())

        assert transport.read_message() == "msg"

    def test_returns_none_on_eof(self):
        """Should return None when the stream ends."""
        transport = StdioTransport(stdin=io.StringIO(""), stdout=io.StringIO())

        assert transport.read_message() is None

    def test_returns_none_on_closed_stream(self):
        """Should treat a closed stream as end of input."""
        stdin = io.StringIO("msg\n")
        stdin.close()

        assert StdioTransport(stdin=stdin, stdout=io.StringIO()).read_message() is None

    def test_undecodable_line_does_not_lose_next_message(self):
        """Should reject a line that is not UTF-8 and keep reading after it."""
        raw = io.BytesIO(b"\xff\xfe garbage\n" + b'{"jsonrpc": "2.0"}\n')
        transport = StdioTransport(
            stdin=io.TextIOWrapper(raw, encoding="utf-8"), stdout=io.StringIO()
        )

        with pytest.raises(MessageDecodeError):
            transport.read_message()
        assert transport.read_message() == '{"jsonrpc": "2.0"}'
        assert transport.read_message() is None

    def test_writes_newline_terminated(self):
        """Should write each message on its own line."""
        stdout = io.StringIO()
        transport = StdioTransport(stdin=io.StringIO(), stdout=stdout)

        transport.write_message('{"a":1}')
        transport.write_message('{"b":2}')

        assert stdout.getvalue() == '{"a":1}\n{"b":2}\n'


class TestServerState:
    """Tests for ServerState."""

    def test_defaults(self):
        """Should start stopped with no client."""
        state = ServerState()

        assert state.running is False
        assert state.connected_client is None
        assert state.client_caps == {}


class TestRunLoop:
    """Tests for Server.start and Server.stop."""

    def test_full_session(self, server):
        """Should answer requests in order and stop at EOF."""
        server.register(make_echo_tool())

        responses = run_session(
            server,
            request("initialize", {"protocolVersion": "2024-11-05"}, msg_id=1),
            notification("notifications/initialized"),
            "",
            request("tools/call", {"name": "echo", "arguments": {"text": "hi"}}, msg_id=2),
            "not json",
        )

        assert [r["id"] for r in responses] == [1, 2, None]
        assert responses[1]["result"]["content"][0]["text"] == "hi"
        assert responses[2]["error"]["code"] == -32700

    def test_resets_state_after_eof(self, server):
        """Should leave the server stopped and inactive."""
        run_session(server, notification("notifications/initialized"))

        assert server.state.running is False
        assert server.active is False

    def test_stop_ends_loop(self, server):
        """Should exit after the message during which stop() was called."""

        def stopper(args):
            server.stop()
            return "stopping"

        server.register(Tool(name="stop", description="stops the server", handler=stopper))

        responses = run_session(
            server,
            request("tools/call", {"name": "stop"}, msg_id=1),
            request("tools/list", msg_id=2),
        )

        assert [r["id"] for r in responses] == [1]

    def test_stop_when_not_running(self, server):
        """Should raise ServerError."""
        with pytest.raises(ServerError):
            server.stop()

    def test_start_when_running(self, server):
        """Should refuse to start twice."""
        server.state.running = True

        with pytest.raises(ServerError):
            server.start(transport=StdioTransport(stdin=io.StringIO(), stdout=io.StringIO()))

    def test_write_failure_sends_fallback_error(self, server, log_stream):
        """Should log the failure and keep going."""

        class FlakyStdout(io.StringIO):
            failed = False

            def write(self, text):
                if not self.failed:
                    self.failed = True
                    raise OSError("pipe hiccup")
                return super().write(text)

        stdout = FlakyStdout()
        transport = StdioTransport(stdin=io.StringIO(request("tools/list") + "\n"), stdout=stdout)

        server.start(transport=transport)

        fallback = json.loads(stdout.getvalue())
        assert fallback["id"] is None
        assert fallback["error"]["code"] == -32603
        assert "pipe hiccup" in log_stream.getvalue()

    def test_undecodable_line_gets_parse_error(self, server, log_stream):
        """Should answer a non-UTF-8 line with a parse error and serve the next one."""
        server.register(make_echo_tool())
        line = request("tools/call", {"name": "echo", "arguments": {"text": "hi"}}, msg_id=2)
        raw = io.BytesIO(b"\xff\xfe garbage\n" + line.encode() + b"\n")
        stdout = io.StringIO()

        server.start(
            transport=StdioTransport(stdin=io.TextIOWrapper(raw, encoding="utf-8"), stdout=stdout)
        )

        responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert [r["id"] for r in responses] == [None, 2]
        assert responses[0]["error"]["code"] == -32700
        assert responses[1]["result"]["content"][0]["text"] == "hi"
        assert "undecodable" in log_stream.getvalue()

    def test_traffic_is_logged(self, server, tmp_path):
        """Should record every line read and written."""
        log_path = tmp_path / "traffic.jsonl"
        stdin = io.StringIO(request("tools/list") + "\n")

        with TrafficLogger(log_path) as traffic_log:
            server.start(
                transport=StdioTransport(stdin=stdin, stdout=io.StringIO()),
                traffic_log=traffic_log,
            )

        records = [json.loads(line) for line in log_path.read_text().splitlines()]
        assert [r["type"] for r in records] == ["request", "response"]
        assert records[0]["message"]["method"] == "tools/list"
