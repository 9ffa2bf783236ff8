"""Unit tests for the request dispatcher.

Dispatcher methods are synchronous and never raise; unmatched names come
back as UnknownName.
"""

import json
from unittest.mock import patch

import pytest

from codesentry_mcp import catalog
from codesentry_mcp.dispatch import (
    NOT_IMPLEMENTED_MARKER,
    PONG_TEXT,
    Dispatcher,
    Found,
    UnknownName,
)
from codesentry_mcp.models import AnalysisConfig


@pytest.fixture
def dispatcher():
    return Dispatcher()


class TestTools:
    """list_tools() and call_tool()."""

    def test_list_tools_returns_catalog(self, dispatcher):
        tools = dispatcher.list_tools()
        assert [t.name for t in tools] == ["ping", "analyze_repository"]

    def test_analyze_repository_schema(self, dispatcher):
        """analyze_repository requires path and declares the config flags."""
        tool = dispatcher.list_tools()[1]
        schema = tool.inputSchema
        assert schema["required"] == ["path"]
        assert schema["properties"]["path"]["type"] == "string"
        config_props = schema["properties"]["config"]["properties"]
        assert set(config_props) == {
            "enableSecurity",
            "enablePerformance",
            "enableQuality",
            "enableDocumentation",
        }

    def test_ping_schema_has_optional_message(self, dispatcher):
        schema = dispatcher.list_tools()[0].inputSchema
        assert schema["properties"]["message"]["type"] == "string"
        assert "required" not in schema

    @pytest.mark.parametrize(
        "name, arguments",
        [("ping", {}), ("analyze_repository", {"path": "/tmp/x"})],
    )
    def test_supported_tools_return_text(self, dispatcher, name, arguments):
        """Every supported tool returns a non-empty list of text content."""
        outcome = dispatcher.call_tool(name, arguments)
        assert isinstance(outcome, Found)
        assert outcome.value
        assert all(item.type == "text" for item in outcome.value)

    def test_ping_without_message(self, dispatcher):
        """ping with no message returns only the greeting."""
        outcome = dispatcher.call_tool("ping", {})
        assert outcome.value[0].text == PONG_TEXT
        assert "Message:" not in outcome.value[0].text

    def test_ping_with_none_arguments(self, dispatcher):
        outcome = dispatcher.call_tool("ping", None)
        assert outcome.value[0].text == PONG_TEXT

    def test_ping_echoes_message(self, dispatcher):
        outcome = dispatcher.call_tool("ping", {"message": "hello"})
        text = outcome.value[0].text
        assert text.startswith(PONG_TEXT)
        assert "hello" in text

    def test_ping_ignores_empty_message(self, dispatcher):
        outcome = dispatcher.call_tool("ping", {"message": ""})
        assert outcome.value[0].text == PONG_TEXT

    def test_analyze_repository_is_a_stub(self, dispatcher):
        """The stub names the path, flags the gap and touches no files."""
        with patch("pathlib.Path.exists") as exists, patch("os.walk") as walk:
            outcome = dispatcher.call_tool("analyze_repository", {"path": "/tmp/x"})

        text = outcome.value[0].text
        assert "/tmp/x" in text
        assert NOT_IMPLEMENTED_MARKER in text
        exists.assert_not_called()
        walk.assert_not_called()

    def test_analyze_repository_without_path(self, dispatcher):
        """Nothing is validated; a missing path still gets the stub reply."""
        outcome = dispatcher.call_tool("analyze_repository", {})
        assert isinstance(outcome, Found)
        assert NOT_IMPLEMENTED_MARKER in outcome.value[0].text

    def test_analyze_repository_reports_requested_analyses(self, dispatcher):
        outcome = dispatcher.call_tool(
            "analyze_repository",
            {"path": ".", "config": {"enableSecurity": False, "enableQuality": False}},
        )
        assert "Requested analyses: performance, documentation" in outcome.value[0].text

    def test_unknown_tool(self, dispatcher):
        outcome = dispatcher.call_tool("delete_everything", {})
        assert outcome == UnknownName("tool", "delete_everything")
        assert outcome.message == "Unknown tool: delete_everything"


class TestRequestedAnalyses:
    """Merging per-call options over the baseline config."""

    def test_defaults_enable_everything(self, dispatcher):
        assert dispatcher.requested_analyses(None) == [
            "security",
            "performance",
            "quality",
            "documentation",
        ]

    def test_options_can_enable_over_baseline(self):
        baseline = AnalysisConfig(enable_documentation=False)
        dispatcher = Dispatcher(baseline)
        assert "documentation" not in dispatcher.requested_analyses({})
        assert "documentation" in dispatcher.requested_analyses({"enableDocumentation": True})

    def test_malformed_options_ignored(self, dispatcher):
        """Options that do not parse fall back to the baseline."""
        result = dispatcher.requested_analyses({"enableSecurity": {"nested": 1}})
        assert result == ["security", "performance", "quality", "documentation"]

    def test_non_mapping_options_ignored(self, dispatcher):
        assert len(dispatcher.requested_analyses("all")) == 4


class TestResources:
    """list_resources() and read_resource()."""

    def test_list_resources(self, dispatcher):
        resources = dispatcher.list_resources()
        assert len(resources) == 1
        assert str(resources[0].uri) == catalog.CONFIG_RESOURCE_URI
        assert resources[0].mimeType == "application/json"

    def test_read_config_resource(self, dispatcher):
        """The config resource round-trips to the default AnalysisConfig."""
        outcome = dispatcher.read_resource("codesentry://config")
        assert isinstance(outcome, Found)

        contents = outcome.value[0]
        assert contents.mimeType == "application/json"

        data = json.loads(contents.text)
        assert data["enableSecurity"] is True
        assert data["enablePerformance"] is True
        assert data["enableQuality"] is True
        assert data["enableDocumentation"] is True
        assert data["maxFileSize"] == 1048576
        assert ".ts" in data["supportedExtensions"]
        assert ".py" in data["supportedExtensions"]
        assert "node_modules/" in data["ignorePatterns"]

    def test_read_resource_uses_injected_config(self):
        dispatcher = Dispatcher(AnalysisConfig(max_file_size=10))
        outcome = dispatcher.read_resource("codesentry://config")
        assert json.loads(outcome.value[0].text)["maxFileSize"] == 10

    def test_unknown_resource(self, dispatcher):
        outcome = dispatcher.read_resource("codesentry://secrets")
        assert isinstance(outcome, UnknownName)
        assert outcome.message == "Unknown resource: codesentry://secrets"


class TestPrompts:
    """list_prompts() and get_prompt()."""

    def test_list_prompts(self, dispatcher):
        prompts = dispatcher.list_prompts()
        assert [p.name for p in prompts] == ["code_review", "security_audit"]
        assert all(p.description for p in prompts)
        assert all(not p.arguments for p in prompts)

    @pytest.mark.parametrize(
        "name, expected",
        [("code_review", "comprehensive code review"), ("security_audit", "OWASP Top 10")],
    )
    def test_get_prompt(self, dispatcher, name, expected):
        outcome = dispatcher.get_prompt(name)
        assert isinstance(outcome, Found)
        result = outcome.value
        assert result.description
        assert len(result.messages) == 1
        message = result.messages[0]
        assert message.role == "user"
        assert expected in message.content.text

    def test_get_prompt_ignores_arguments(self, dispatcher):
        plain = dispatcher.get_prompt("security_audit")
        with_args = dispatcher.get_prompt("security_audit", {"language": "go"})
        assert plain.value == with_args.value

    def test_unknown_prompt(self, dispatcher):
        outcome = dispatcher.get_prompt("write_my_code")
        assert outcome == UnknownName("prompt", "write_my_code")
        assert outcome.message == "Unknown prompt: write_my_code"
