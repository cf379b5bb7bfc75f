"""
Hello World responder served by uvicorn.
Every request, whatever its method or path, gets the same plain-text greeting.
"""
import asyncio
import logging
import os
import threading
import time

import uvicorn
from fastapi import FastAPI, Request, Response

import async_probe

# Only the bind address is overridable; the container service needs 0.0.0.0
HOST = os.environ.get("HELLO_HOST", "127.0.0.1")
PORT = int(os.environ.get("HELLO_PORT", "1337"))
LOG_LEVEL = "info"

GREETING = "Hello World\n"

logger = logging.getLogger("hello_world")

# Docs routes are disabled so no path escapes the greeting
app = FastAPI(
    title="Hello World",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


async def hello(request: Request) -> Response:
    """Answer any request with the fixed greeting."""
    return Response(content=GREETING, headers={"Content-Type": "text/plain"})


# A plain Starlette route with no method list matches every method
app.add_route("/{path:path}", hello, include_in_schema=False)


class ListenerError(RuntimeError):
    """The listener could not be brought up."""


class HelloServer:
    """Explicit start/stop handle around uvicorn running in a background thread.

    Args:
        host: Address to bind
        port: Port to bind, 0 picks a free one
        log_level: uvicorn log level
    """

    def __init__(self, host: str = HOST, port: int = PORT, log_level: str = LOG_LEVEL):
        self.config = uvicorn.Config(app, host=host, port=port, log_level=log_level)
        self.server = uvicorn.Server(self.config)
        self._thread = None

    @property
    def port(self) -> int:
        servers = getattr(self.server, "servers", None)
        if not servers:
            return self.config.port
        return servers[0].sockets[0].getsockname()[1]

    @property
    def url(self) -> str:
        return f"http://{self.config.host}:{self.port}/"

    def start(self, timeout: float = 5.0) -> "HelloServer":
        """Bind the listener and block until it accepts connections.

        Raises:
            ListenerError: already running, uvicorn exited during startup,
                or it did not come up in time
        """
        if self._thread is not None:
            raise ListenerError(f"already listening on {self.url}")

        # uvicorn servers are single-use: started/should_exit never reset
        self.server = uvicorn.Server(self.config)
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not self.server.started:
            if not self._thread.is_alive():
                self._thread = None
                raise ListenerError(
                    f"could not bind {self.config.host}:{self.config.port}"
                )
            if time.monotonic() > deadline:
                self.stop()
                raise ListenerError(f"listener not up after {timeout}s")
            time.sleep(0.01)

        logger.info("Server running at %s", self.url)
        return self

    def stop(self) -> None:
        """Ask uvicorn to exit and wait for its thread."""
        self.server.should_exit = True
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc_info):
        self.stop()


async def serve(host: str = HOST, port: int = PORT) -> None:
    """Serve the greeting and run the probe side by side on this loop."""
    server = uvicorn.Server(
        uvicorn.Config(app, host=host, port=port, log_level=LOG_LEVEL)
    )
    probe = async_probe.launch()
    logger.info("Server running at http://%s:%s/", host, port)
    try:
        await server.serve()
    finally:
        probe.cancel()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:     %(message)s")
    asyncio.run(serve())


if __name__ == "__main__":
    # Run the app when called as a module
    main()
