"""MCP stdio transport exposing the `audit` tool."""

import json
import logging

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from diff_auditor import __version__
from diff_auditor.agents.exceptions import AgentError
from diff_auditor.config import AuditConfig
from diff_auditor.orchestrator.service import create_graph, perform_audit
from diff_auditor.transport.params import InvalidParamsError, parse_audit_params

logger = logging.getLogger(__name__)

SERVER_NAME = "diff-audit-server"


def run_audit_tool(graph, params: dict) -> str:
    """Execute one `audit` tool call and return the report as JSON text.

    Raises:
        ToolError: With a {"status": "failed", "error": ...} JSON payload;
            FastMCP turns it into an error result.
    """
    try:
        request = parse_audit_params(params)
        report = perform_audit(graph, request)
    except (InvalidParamsError, AgentError) as exc:
        logger.error("audit tool failed: %s", exc)
        raise ToolError(
            json.dumps({"status": "failed", "error": str(exc)}, ensure_ascii=False, indent=2)
        ) from exc
    return json.dumps(report.to_wire(), ensure_ascii=False, indent=2)


def create_mcp_server(config: AuditConfig, graph=None) -> FastMCP:
    """Create a FastMCP server with the `audit` tool registered."""
    server = FastMCP(SERVER_NAME, instructions=f"{SERVER_NAME} {__version__}: audits code diffs")
    audit_graph = graph if graph is not None else create_graph(config)

    @server.tool(name="audit")
    def audit(
        request: str,
        modification_description: str,
        code_changes: str,
        function_list: str,
        changed_files: list[str] | None = None,
    ) -> str:
        """Audit a code diff against its modification description and function list.

        Args:
            request: The audit request text.
            modification_description: Description of the intended change.
            code_changes: Unified diff of the change.
            function_list: Contents of function_list.txt.
            changed_files: Changed file paths; the diff is restricted to them.
        """
        return run_audit_tool(
            audit_graph,
            {
                "request": request,
                "modification_description": modification_description,
                "code_changes": code_changes,
                "function_list": function_list,
                "changed_files": changed_files,
            },
        )

    return server


def serve(config: AuditConfig) -> None:
    """Serve the MCP tool over stdin/stdout until the client disconnects."""
    logger.info("Starting MCP server on stdio")
    create_mcp_server(config).run(transport="stdio")
