"""CLI entry point for the DSGS HTTP transport."""

import argparse
import functools

from dsgs.config import settings


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="dsgs-server",
        description="DSGS constraint server over HTTP",
    )
    parser.add_argument("--host", default=settings.host, help=f"Bind host (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default: {settings.port})")
    parser.add_argument(
        "--max-connections",
        type=int,
        default=settings.max_connections,
        help=f"Concurrent connection limit (default: {settings.max_connections})",
    )
    args = parser.parse_args(argv)
    serve_http(args.host, args.port, args.max_connections)


def serve_http(host: str, port: int, max_connections: int) -> None:
    import uvicorn

    from dsgs.logging_config import configure_logging
    from dsgs.mcp.http_server import create_app

    configure_logging(log_level=settings.log_level, json_output=settings.json_logs)
    uvicorn.run(
        functools.partial(create_app, host=host, port=port),
        factory=True,
        host=host,
        port=port,
        limit_concurrency=max_connections,
        log_config=None,
    )


if __name__ == "__main__":
    main()
