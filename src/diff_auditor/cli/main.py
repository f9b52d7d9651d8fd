"""CLI entry point for the diff auditor."""
import argparse
from dotenv import load_dotenv
import json
import logging
import shutil
import subprocess
import sys
import traceback
from pathlib import Path

from diff_auditor.agents.exceptions import AgentError
from diff_auditor.config import SUPPORTED_PROVIDERS, AuditConfig
from diff_auditor.orchestrator.exceptions import OrchestratorError

load_dotenv()

logger = logging.getLogger("diff_auditor.cli")

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_AGENT_ERROR = 2
EXIT_ORCHESTRATOR_ERROR = 3
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

DEFAULT_SEND_TIMEOUT = 600
REQUEST_FILE = Path("audits") / "audit-request.json"
PROMPT_FILE = Path("audits") / "temp-audit-request.txt"

LOG_FORMAT = "[%(levelname)s] %(message)s"
VERBOSE_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="diff-auditor",
        description="Audit staged/unstaged git changes with an LLM provider",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    prepare = subparsers.add_parser(
        "prepare", help="Build the tool/audit JSON-RPC request for the current changes"
    )
    _add_dir_argument(prepare)
    prepare.add_argument(
        "--http",
        nargs="?",
        const=-1,
        type=int,
        default=None,
        metavar="PORT",
        help="Print curl instructions for the HTTP server (optionally on PORT)",
    )
    prepare.add_argument(
        "--send", action="store_true", help="POST the request to the HTTP server (implies --http)"
    )
    prepare.add_argument(
        "--send-timeout",
        type=int,
        default=DEFAULT_SEND_TIMEOUT,
        help=f"Seconds to wait for the server when sending (default: {DEFAULT_SEND_TIMEOUT})",
    )
    prepare.add_argument(
        "--output-json", action="store_true", help="Output the request with scope diagnostics as JSON"
    )

    run = subparsers.add_parser("run", help="Run the full audit locally and save the report")
    _add_dir_argument(run)
    _add_provider_argument(run)
    run.add_argument("--description", type=str, default=None, help="Override task_list.txt")
    run.add_argument("--dry-run", action="store_true", help="Print config and exit without running")
    run.add_argument("--output-json", action="store_true", help="Output the result as JSON")

    prompt = subparsers.add_parser(
        "prompt", help="Render a copy-to-chat audit prompt and copy it to the clipboard"
    )
    _add_dir_argument(prompt)
    prompt.add_argument("description", nargs="+", help="Modification description")

    serve_http = subparsers.add_parser("serve-http", help="Serve tool/audit over HTTP JSON-RPC")
    _add_provider_argument(serve_http)
    serve_http.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve_http.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 3000)")

    serve_mcp = subparsers.add_parser("serve-mcp", help="Serve the audit tool over MCP stdio")
    _add_provider_argument(serve_mcp)

    return parser


def _add_dir_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dir",
        type=str,
        default=".",
        help="Directory to audit from; only changes below it are included (default: .)",
    )


def _add_provider_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        choices=SUPPORTED_PROVIDERS,
        help="Completion provider (default: $AI_PROVIDER or deepseek)",
    )


def configure_logging(verbose: bool) -> None:
    """Log to stderr so stdout stays machine-readable."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=VERBOSE_LOG_FORMAT if verbose else LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    if not verbose:
        for noisy in ("httpx", "httpcore", "openai"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def validate_working_dir(raw_path: str) -> Path:
    """Resolve the audit directory.

    Raises:
        SystemExit: If path is not a valid directory.
    """
    resolved = Path(raw_path).resolve()
    if not resolved.is_dir():
        print(f"Error: '{raw_path}' is not a valid directory.", file=sys.stderr)
        raise SystemExit(EXIT_INVALID_INPUT)
    return resolved


def load_config(args: argparse.Namespace) -> AuditConfig:
    return AuditConfig.from_env(provider=getattr(args, "provider", None))


def collect_request(
    args: argparse.Namespace,
    config: AuditConfig,
    description: str | None = None,
    graph=None,
) -> dict:
    """Run the collection stages only and return the final graph state.

    A graph built by the caller is reused; otherwise one is created.
    """
    from diff_auditor.agents.request_builder import read_function_list, read_modification_description
    from diff_auditor.orchestrator.service import create_graph, run_pipeline
    from diff_auditor.utils.ignore_file import AUDIT_IGNORE_FILE, load_ignore_patterns

    working_dir = validate_working_dir(args.dir)
    if description is None:
        description = read_modification_description(working_dir)
    patterns = load_ignore_patterns(working_dir)
    if patterns is None:
        logger.info("%s not found; every changed file is in scope", AUDIT_IGNORE_FILE)
    else:
        logger.info("Loaded %d ignore pattern(s) from %s", len(patterns), AUDIT_IGNORE_FILE)

    if graph is None:
        graph = create_graph(config)
    return run_pipeline(
        graph,
        working_dir=working_dir,
        modification_description=description,
        function_list=read_function_list(working_dir),
        ignore_patterns=patterns,
        prepare_only=True,
    )


def format_result_json(result: dict) -> str:
    """Serialize a result dict, dumping Pydantic values by alias."""

    def _serialize(obj):
        if obj is None:
            return None
        if hasattr(obj, "model_dump"):
            return obj.model_dump(by_alias=True)
        return obj

    prepared = {k: _serialize(v) for k, v in result.items()}
    return json.dumps(prepared, indent=2, ensure_ascii=False, default=str)


def print_scope_summary(state: dict) -> None:
    """Print the per-stage file counts to stderr."""
    scope = state.get("scope_result")
    scoped = state.get("scoped_diff")
    if scope is None:
        return
    print(f"Changed files in repository: {scope.total}", file=sys.stderr)
    print(f"Outside the working directory: {scope.boundary_excluded}", file=sys.stderr)
    for stat in scope.pattern_stats:
        print(f"Excluded by '{stat.pattern}': {stat.excluded}", file=sys.stderr)
    print(f"Files to audit: {len(scope.authorized)}", file=sys.stderr)
    if scoped is not None and scoped.unexpected_files:
        print(
            f"Warning: {scoped.discrepancy_count} file(s) in the diff were outside the audit scope "
            "and have been removed:",
            file=sys.stderr,
        )
        for path in scoped.unexpected_files:
            print(f"  - {path}", file=sys.stderr)


def print_result_human(report) -> None:
    """Print an AuditReport in human-readable format."""
    print(f"\n{'='*60}")
    print("Audit Results")
    print(f"{'='*60}")
    print(f"\nStatus: {report.status}")
    print(f"Message: {report.message}")
    print(f"Report saved to: {report.report_path}")
    print(f"Files audited: {report.files_audited}")
    if report.processing_seconds is not None:
        print(f"Processing time: {report.processing_seconds:.2f}s")
    if report.unexpected_files:
        print(f"\nRemoved out-of-scope files ({len(report.unexpected_files)}):")
        for path in report.unexpected_files:
            print(f"  - {path}")
    print(f"\n{'='*20} Audit report {'='*20}")
    print(report.ai_report)
    print(f"\n{'='*60}")


def print_config_human(config: AuditConfig) -> None:
    """Print configuration without secrets."""
    print("\nConfiguration:")
    print(f"{'='*40}")
    for key, value in config.safe_dict().items():
        print(f"  {key}: {value}")
    print(f"{'='*40}")


def print_http_instructions(port: int, request_file: Path) -> None:
    print(
        "\n========================================================\n"
        "Send the request to the HTTP server with:\n\n"
        f"curl -X POST http://localhost:{port}/ \\\n"
        "  -H \"Content-Type: application/json\" \\\n"
        f"  -d @{request_file} | jq\n"
        "========================================================\n"
    )


def send_request(payload: dict, port: int, timeout: int) -> dict:
    """POST a JSON-RPC payload to the local HTTP server."""
    import httpx

    response = httpx.post(f"http://localhost:{port}/", json=payload, timeout=timeout)
    return response.json()


def print_server_response(response: dict) -> None:
    result = response.get("result") if isinstance(response, dict) else None
    ai_report = result.get("aiReport") if isinstance(result, dict) else None
    print("========================================================")
    print("Server response:\n")
    if ai_report:
        trimmed = dict(response)
        trimmed["result"] = {k: v for k, v in result.items() if k != "aiReport"}
        print(json.dumps(trimmed, indent=2, ensure_ascii=False))
        print("\n========== Audit report ==========")
        print(ai_report)
        print("==================================")
    else:
        print(json.dumps(response, indent=2, ensure_ascii=False))
    print("========================================================")


def copy_to_clipboard(text: str) -> bool:
    """Copy text with the platform clipboard tool; False if none worked."""
    if sys.platform == "darwin":
        command = ["pbcopy"]
    elif sys.platform == "win32":
        command = ["clip"]
    elif shutil.which("xclip"):
        command = ["xclip", "-selection", "clipboard"]
    else:
        return False
    try:
        subprocess.run(command, input=text.encode("utf-8"), check=True, timeout=10)
    except (OSError, subprocess.SubprocessError):
        return False
    return True


def cmd_prepare(args: argparse.Namespace) -> int:
    from diff_auditor.agents.request_builder import format_jsonrpc, to_jsonrpc

    config = load_config(args)
    state = collect_request(args, config)
    print_scope_summary(state)
    payload = to_jsonrpc(state["audit_request"])
    request_json = format_jsonrpc(state["audit_request"])

    http_mode = args.http is not None or args.send
    if args.output_json and not http_mode:
        scoped = state.get("scoped_diff")
        print(format_result_json({
            "request": payload,
            "scope": state.get("scope_result"),
            "unexpected_files": scoped.unexpected_files if scoped is not None else [],
            "errors": state.get("errors", []),
        }))
        return EXIT_SUCCESS
    if not http_mode:
        print(request_json)
        return EXIT_SUCCESS

    port = args.http if args.http is not None and args.http > 0 else config.port
    request_file = validate_working_dir(args.dir) / REQUEST_FILE
    request_file.parent.mkdir(parents=True, exist_ok=True)
    request_file.write_text(request_json, encoding="utf-8")
    print_http_instructions(port, request_file)

    if args.send:
        logger.info("Sending request to http://localhost:%d/", port)
        print_server_response(send_request(payload, port, args.send_timeout))
    return EXIT_SUCCESS


def cmd_run(args: argparse.Namespace) -> int:
    config = load_config(args)
    if args.dry_run:
        if args.output_json:
            print(json.dumps(config.safe_dict(), indent=2))
        else:
            print_config_human(config)
        return EXIT_SUCCESS

    from diff_auditor.orchestrator.service import create_graph, perform_audit

    graph = create_graph(config)
    state = collect_request(args, config, description=args.description, graph=graph)
    print_scope_summary(state)
    report = perform_audit(graph, state["audit_request"])
    scoped = state.get("scoped_diff")
    if scoped is not None and scoped.unexpected_files:
        report = report.model_copy(update={"unexpected_files": scoped.unexpected_files})

    if args.output_json:
        print(json.dumps(report.to_wire(), indent=2, ensure_ascii=False))
    else:
        print_result_human(report)
    return EXIT_SUCCESS


def cmd_prompt(args: argparse.Namespace) -> int:
    from diff_auditor.agents.prompts import build_chat_prompt

    config = load_config(args)
    state = collect_request(args, config, description=" ".join(args.description))
    prompt_text = build_chat_prompt(state["audit_request"])

    prompt_file = validate_working_dir(args.dir) / PROMPT_FILE
    prompt_file.parent.mkdir(parents=True, exist_ok=True)
    prompt_file.write_text(prompt_text, encoding="utf-8")
    print(f"Audit prompt written to {prompt_file}")
    if copy_to_clipboard(prompt_text):
        print("Prompt copied to the clipboard; paste it into your chat assistant.")
    else:
        print("Could not copy to the clipboard; copy the prompt from the file instead.")
    return EXIT_SUCCESS


def cmd_serve_http(args: argparse.Namespace) -> int:
    from diff_auditor.transport.http_server import serve

    serve(load_config(args), host=args.host, port=args.port)
    return EXIT_SUCCESS


def cmd_serve_mcp(args: argparse.Namespace) -> int:
    from diff_auditor.transport.mcp_server import serve

    serve(load_config(args))
    return EXIT_SUCCESS


COMMANDS = {
    "prepare": cmd_prepare,
    "run": cmd_run,
    "prompt": cmd_prompt,
    "serve-http": cmd_serve_http,
    "serve-mcp": cmd_serve_mcp,
}


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        return COMMANDS[args.command](args)

    except SystemExit as exc:
        return exc.code

    except AgentError as exc:
        return _handle_error("Audit error", exc, args.verbose, EXIT_AGENT_ERROR)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_ORCHESTRATOR_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)


if __name__ == "__main__":
    sys.exit(main())
