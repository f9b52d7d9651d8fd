"""Tests for the MCP stdio transport."""

import asyncio
import json
from unittest.mock import MagicMock, patch

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from diff_auditor.agents.exceptions import ProviderRequestError
from diff_auditor.models import AuditReport
from diff_auditor.transport.mcp_server import SERVER_NAME, create_mcp_server, run_audit_tool

_PERFORM = "diff_auditor.transport.mcp_server.perform_audit"

PARAMS = {
    "request": "r",
    "modification_description": "Add login",
    "code_changes": "diff --git a/a.ts b/a.ts\n+x\n",
    "function_list": "f",
    "changed_files": None,
}


def test_run_audit_tool_returns_report_json():
    report = AuditReport(status="success", message="ok", report_path="/r.txt", ai_report="本文")
    with patch(_PERFORM, return_value=report):
        text = run_audit_tool(MagicMock(), PARAMS)
    data = json.loads(text)
    assert data["aiReport"] == "本文"
    assert data["reportPath"] == "/r.txt"
    assert "本文" in text


def test_run_audit_tool_invalid_params():
    with pytest.raises(ToolError) as exc_info:
        run_audit_tool(MagicMock(), {**PARAMS, "modification_description": ""})
    payload = json.loads(str(exc_info.value))
    assert payload["status"] == "failed"
    assert "modification_description" in payload["error"]


def test_run_audit_tool_provider_failure():
    error = ProviderRequestError("deepseek API error: 500\nboom", provider="deepseek", status_code=500)
    with patch(_PERFORM, side_effect=error):
        with pytest.raises(ToolError) as exc_info:
            run_audit_tool(MagicMock(), PARAMS)
    assert json.loads(str(exc_info.value)) == {
        "status": "failed",
        "error": "deepseek API error: 500\nboom",
    }


def test_server_registers_audit_tool(config):
    server = create_mcp_server(config, graph=MagicMock())
    assert server.name == SERVER_NAME
    tools = asyncio.run(server.list_tools())
    assert [tool.name for tool in tools] == ["audit"]
    schema = tools[0].inputSchema
    assert set(schema["required"]) == {
        "request", "modification_description", "code_changes", "function_list",
    }
    assert "changed_files" in schema["properties"]
