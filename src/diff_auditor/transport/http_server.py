"""JSON-RPC over HTTP transport for the `tool/audit` method."""

import asyncio
import json
import logging
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from diff_auditor.agents.exceptions import AgentError
from diff_auditor.agents.request_builder import AUDIT_METHOD, JSONRPC_VERSION
from diff_auditor.config import AuditConfig
from diff_auditor.orchestrator.service import create_graph, perform_audit
from diff_auditor.transport.params import InvalidParamsError, parse_audit_params

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
AUDIT_FAILED = -32000


def _error(request_id: Any, code: int, message: str) -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def process_jsonrpc_request(graph, body: dict) -> dict:
    """Handle one JSON-RPC request body and return the response body.

    Audit failures become JSON-RPC error objects; anything unexpected is
    left to the caller.
    """
    request_id = body.get("id")
    if body.get("method") != AUDIT_METHOD:
        return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {body.get('method')}")

    try:
        audit_request = parse_audit_params(body.get("params"))
    except InvalidParamsError as exc:
        return _error(request_id, INVALID_PARAMS, str(exc))

    try:
        report = perform_audit(graph, audit_request)
    except AgentError as exc:
        logger.error("Audit failed: %s", exc)
        return _error(request_id, AUDIT_FAILED, str(exc))

    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": report.to_wire()}


def create_app(config: AuditConfig, graph=None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Runtime configuration (provider, reports directory).
        graph: Prebuilt audit graph; built from config when omitted.
    """
    app = FastAPI(title="diff-auditor", description="JSON-RPC code audit endpoint")
    app.state.config = config
    app.state.graph = graph if graph is not None else create_graph(config)

    @app.post("/")
    async def jsonrpc_endpoint(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=_error(None, PARSE_ERROR, "Parse error: request body is not valid JSON"),
            )
        if not isinstance(body, dict) or not body.get("method") or "params" not in body:
            request_id = body.get("id") if isinstance(body, dict) else None
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=_error(request_id, INVALID_REQUEST, "Invalid Request: malformed JSON-RPC request"),
            )
        logger.info("Received %s request id=%s", body.get("method"), body.get("id"))
        logger.debug("Request body: %s", json.dumps(body, ensure_ascii=False)[:2000])
        try:
            response = await asyncio.to_thread(process_jsonrpc_request, app.state.graph, body)
        except Exception as exc:
            logger.exception("Unexpected error handling request")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=_error(body.get("id"), INTERNAL_ERROR, str(exc)),
            )
        return JSONResponse(content=response)

    @app.get("/health")
    def health(request: Request) -> dict:
        current: AuditConfig = request.app.state.config
        return {
            "status": "ok",
            "provider": current.provider,
            "model": current.model_for(current.provider),
            "credential_configured": bool(current.api_key_for(current.provider)),
        }

    return app


def serve(config: AuditConfig, host: str = "127.0.0.1", port: int | None = None) -> None:
    """Run the HTTP server until interrupted."""
    app = create_app(config)
    bind_port = port or config.port
    logger.info("Audit server listening on http://%s:%d/ (method %s)", host, bind_port, AUDIT_METHOD)
    uvicorn.run(app, host=host, port=bind_port, log_level="info")
