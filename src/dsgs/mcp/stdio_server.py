"""Line-delimited stream transport.

Reads an unbounded input stream, splits it on newlines and dispatches each
non-blank line as one envelope. Responses are written one JSON object per
line. Lines are dispatched without waiting for earlier responses, so output
order can differ from input order. End of input does not stop the server;
only SIGINT/SIGTERM (or :meth:`StdioServer.shutdown`) does.

Usage:
    python -m dsgs.mcp.stdio_server
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Any, TextIO

from dsgs.errors.exceptions import InternalError
from dsgs.mcp.dispatcher import Dispatcher, encode_envelope
from dsgs.models.envelope import SERVER_ERROR_ID
from dsgs.models.envelope import Response as Envelope

logger = logging.getLogger(__name__)

_READ_CHUNK = 65536


class StdioServer:
    """Envelope transport over a byte stream and a text output.

    Lines stay as bytes until the dispatcher decodes them, so a line that is
    not valid UTF-8 is answered with the same parse error HTTP gives.
    """

    def __init__(self, dispatcher: Dispatcher | None = None, output: TextIO | None = None) -> None:
        self._dispatcher = dispatcher or Dispatcher()
        self._output = output or sys.stdout
        self._buffer = b""
        self._pending: set[asyncio.Task] = set()
        self._shutdown = asyncio.Event()

    def feed(self, chunk: bytes) -> None:
        """Append *chunk* to the buffer and dispatch every complete line."""
        self._buffer += chunk
        while b"\n" in self._buffer:
            line, self._buffer = self._buffer.split(b"\n", 1)
            if not line.strip():
                continue
            logger.debug("Processing message: %r", line)
            task = asyncio.create_task(self._handle_line(line))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait until every dispatched line has been answered."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def shutdown(self) -> None:
        self._shutdown.set()

    async def serve(self, reader: asyncio.StreamReader) -> None:
        """Consume *reader* until shutdown is requested.

        Each read races the shutdown event, so a signal stops the server even
        while stdin is open and idle.
        """
        logger.info("MCP stdio server initialized")
        stop = asyncio.ensure_future(self._shutdown.wait())
        try:
            while not stop.done():
                read = asyncio.ensure_future(reader.read(_READ_CHUNK))
                await asyncio.wait({read, stop}, return_when=asyncio.FIRST_COMPLETED)
                if not read.done():
                    read.cancel()
                    await asyncio.gather(read, return_exceptions=True)
                    break
                try:
                    chunk = read.result()
                except (OSError, ValueError) as exc:
                    logger.error("STDIN error: %s", exc)
                    self._write_error(InternalError(f"Internal error: {exc}"))
                    break
                if not chunk:
                    logger.info("STDIN ended, but keeping server running")
                    break
                self.feed(chunk)

            await stop
        finally:
            stop.cancel()
        await self.drain()
        logger.info("MCP stdio server stopped")

    async def _handle_line(self, line: bytes) -> None:
        response = await self._dispatcher.dispatch_raw(line)
        self._write(response)

    def _write_error(self, exc: InternalError) -> None:
        self._write(Envelope.failure(SERVER_ERROR_ID, exc.code, exc.message).to_dict())

    def _write(self, response: dict[str, Any]) -> None:
        self._output.write(encode_envelope(response) + "\n")
        self._output.flush()


async def _connect_stdin() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


async def run_stdio(dispatcher: Dispatcher | None = None) -> None:
    """Serve stdin/stdout until SIGINT or SIGTERM."""
    server = StdioServer(dispatcher)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, server, sig)
        except (NotImplementedError, RuntimeError):
            pass  # Windows event loops lack add_signal_handler
    reader = await _connect_stdin()
    await server.serve(reader)


def _on_signal(server: StdioServer, sig: signal.Signals) -> None:
    logger.info("Received %s, shutting down gracefully", sig.name)
    server.shutdown()


def serve_stdio(log_level: str) -> None:
    """Run the stdio transport with diagnostics routed to stderr."""
    from dsgs.config import settings
    from dsgs.logging_config import configure_logging

    configure_logging(log_level=log_level, json_output=settings.json_logs, stream=sys.stderr)
    try:
        asyncio.run(run_stdio())
    except KeyboardInterrupt:
        pass


def main() -> None:
    import argparse

    from dsgs.config import settings

    parser = argparse.ArgumentParser(
        prog="dsgs-mcp",
        description="DSGS constraint server over line-delimited stdin/stdout",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Diagnostic log level")
    args = parser.parse_args()
    serve_stdio(args.log_level)


if __name__ == "__main__":
    main()
