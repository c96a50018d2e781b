"""
=============================================================================
FILE SERVER
=============================================================================

Ties the components together into a runnable server.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   FileServer    │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────────┐  ┌──────────────────┐  │
    │    │ SocketServer │    │ConnectionHandler │  │ ResourceResolver │  │
    │    │ accept loop, │───►│ parse → resolve  │─►│ RedirectTable +  │  │
    │    │ thread/conn  │    │ → write → close  │  │ document root    │  │
    │    └──────────────┘    └──────────────────┘  └──────────────────┘  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Shared by all connection threads (read-only after construction):
        ServerConfig, RedirectTable, ResourceResolver, ConnectionHandler

=============================================================================
"""

import logging
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import SocketServer
from .handlers import ConnectionHandler, RedirectTable, ResourceResolver
from .http import RequestParser, ResponseWriter


logger = logging.getLogger(__name__)


class FileServer:
    """
    Static file server.

    Usage:
        server = FileServer(ServerConfig(port=6789, document_root="./public"))
        server.run()  # Blocks until Ctrl+C / SIGTERM

    From another thread (tests):
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(5.0)
        host, port = server.address
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Build every shared component up front.

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.redirects = RedirectTable(self.config.redirects)
        self.resolver = ResourceResolver(self.config.document_root, self.redirects)
        self.handler = ConnectionHandler(
            resolver=self.resolver,
            parser=RequestParser(
                max_line_size=self.config.max_line_size,
                max_headers=self.config.max_headers,
            ),
            writer=ResponseWriter(server_name=self.config.server_name),
            access_logger=AccessLogger(log_format=self.config.log_format),
            reject_malformed=self.config.reject_malformed,
        )

        self._socket_server = SocketServer(self.config)

    @property
    def address(self):
        """The (host, port) the server is bound to."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def run(self, setup_logging: bool = True):
        """
        Start serving (blocking).

        Args:
            setup_logging: Configure the root logger from the config.
                           Pass False when embedding in an application
                           that configures logging itself.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(
            f"Serving {self.resolver.root_dir} on {self.config.host}:{self.config.port} "
            f"({len(self.redirects)} redirects)"
        )

        try:
            self._socket_server.start(self.handler.handle)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections; in-flight ones finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("fileserver").setLevel(level)
