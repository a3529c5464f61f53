"""Main entry point for the ATS gateway."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from ats_gateway import __version__
from ats_gateway.config.settings import Settings
from ats_gateway.utils.logging import configure_logging, get_logger

DEFAULT_GATEWAY_URL = "http://localhost:3000"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ats-gateway",
        description="ATS Gateway: provider proxy, remote config and PDF rendering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ats_gateway serve --port 3000
  python -m ats_gateway diagnostics
  python -m ats_gateway analyze --jd jd.txt --resume resume.txt --optimize --pdf out.pdf
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP gateway")
    serve_parser.add_argument("--host", default=None, help="Bind address (overrides HOST)")
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Bind port (overrides PORT)"
    )

    subparsers.add_parser(
        "diagnostics",
        help="Print the PDF render environment diagnostics as JSON",
    )

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Score a resume against a job description",
    )
    analyze_parser.add_argument(
        "--jd", type=Path, required=True, help="Path to the job description text file"
    )
    analyze_parser.add_argument(
        "--resume", type=Path, required=True, help="Path to the resume text file"
    )
    analyze_parser.add_argument(
        "--gateway-url",
        default=DEFAULT_GATEWAY_URL,
        help=f"Gateway root URL (default: {DEFAULT_GATEWAY_URL})",
    )
    analyze_parser.add_argument(
        "--key",
        default=None,
        help="Your own provider API key (used directly, or as quota fallback)",
    )
    analyze_parser.add_argument(
        "--no-proxy",
        action="store_true",
        help="Call the provider directly with --key instead of the gateway",
    )
    analyze_parser.add_argument(
        "--optimize",
        action="store_true",
        help="Also generate an optimized resume covering the gaps",
    )
    analyze_parser.add_argument(
        "--pdf",
        type=Path,
        default=None,
        help="Render the report to this PDF path through the gateway",
    )

    return parser


def _serve(settings: Settings, host: str | None, port: int | None, log_level: str) -> int:
    import uvicorn

    from ats_gateway.api.app import create_app

    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=log_level.lower(),
        access_log=log_level.upper() == "DEBUG",
    )
    return 0


async def _diagnostics(settings: Settings) -> dict:
    from ats_gateway.rendering.renderer import PDFRenderer

    renderer = PDFRenderer(settings)
    diagnostics = await renderer.diagnostics()
    return diagnostics.model_dump(mode="json")


async def _analyze(settings: Settings, parsed: argparse.Namespace) -> int:
    from ats_gateway.client.errors import TransportError, WorkflowError
    from ats_gateway.client.report import build_report_html
    from ats_gateway.client.transport import GenerationTransport
    from ats_gateway.client.workflow import MatchWorkflow

    logger = get_logger("cli")
    use_proxy = not parsed.no_proxy

    transport = GenerationTransport(
        parsed.gateway_url,
        provider_base_url=settings.provider_base_url,
        provider_model=settings.provider_model,
        timeout=settings.provider_timeout,
    )
    try:
        if use_proxy:
            try:
                config = await transport.fetch_config()
            except TransportError as e:
                logger.warning("Could not fetch remote config: %s", e)
            else:
                if config.get("maintenanceMode"):
                    message = str(config.get("alertMessage") or "").strip()
                    print(
                        "Service is in maintenance mode" + (f": {message}" if message else ""),
                        file=sys.stderr,
                    )
                    return 1

        workflow = MatchWorkflow(transport, user_key=parsed.key, use_proxy=use_proxy)
        workflow.set_inputs(
            parsed.jd.read_text(encoding="utf-8"),
            parsed.resume.read_text(encoding="utf-8"),
        )

        report = await workflow.analyze()
        print(json.dumps(report.to_payload(), indent=2))

        if parsed.optimize:
            optimized = await workflow.optimize()
            print()
            print(optimized)

        if parsed.pdf is not None:
            html = build_report_html(workflow.analysis, workflow.optimized_text)
            pdf = await transport.render_pdf(html)
            parsed.pdf.write_bytes(pdf)
            print(f"Wrote: {parsed.pdf}")

        return 0

    except WorkflowError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await transport.aclose()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    # If no command specified, show help
    if parsed.command is None:
        parser.print_help()
        return 0

    logger.info(f"ATS Gateway v{__version__} running {parsed.command}")

    if parsed.command == "serve":
        return _serve(settings, parsed.host, parsed.port, log_level)

    if parsed.command == "diagnostics":
        payload = asyncio.run(_diagnostics(settings))
        print(json.dumps(payload, indent=2))
        return 0

    if parsed.command == "analyze":
        if parsed.no_proxy and not parsed.key:
            print("Error: --no-proxy requires --key", file=sys.stderr)
            return 1
        if parsed.no_proxy and parsed.pdf is not None:
            print(
                "Error: --pdf renders through the gateway and cannot be used with --no-proxy",
                file=sys.stderr,
            )
            return 1
        for path in (parsed.jd, parsed.resume):
            if not path.is_file():
                print(f"Error: file not found: {path}", file=sys.stderr)
                return 1
        return asyncio.run(_analyze(settings, parsed))

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
