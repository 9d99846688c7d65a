"""
PactStub Listener

Runs a FastAPI application with uvicorn on a background thread.

The socket is bound synchronously in the caller's thread, so a port that is
already taken (or not permitted) fails immediately with PortUnavailable
instead of surfacing later inside the server thread.
"""

import logging
import socket
import threading
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ..common.errors import PortUnavailable


class HttpListener:
    """
    One uvicorn server bound to one port.

    Example:
        listener = HttpListener(host='127.0.0.1')
        listener.bind(8080, app)
        ...
        listener.unbind()
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        startup_timeout: float = 5.0,
        log_level: str = "warning",
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize listener.

        Args:
            host: Interface to bind
            startup_timeout: Seconds to wait for uvicorn to start serving
            log_level: uvicorn log level
            logger: Diagnostics logger
        """
        self.host = host
        self.startup_timeout = startup_timeout
        self.log_level = log_level
        self.logger = logger or logging.getLogger("pactstub.listener")

        self._lock = threading.Lock()
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self.port: Optional[int] = None

    @property
    def is_bound(self) -> bool:
        return self._server is not None

    def bind(self, port: int, app: FastAPI) -> int:
        """
        Bind the port and start serving the application.

        Args:
            port: Port to bind (0 picks a free port)
            app: Application to serve

        Returns:
            The bound port number

        Raises:
            PortUnavailable: If the port cannot be bound or the server does not start
        """
        with self._lock:
            if self._server is not None:
                raise RuntimeError(f"Listener already bound to port {self.port}")

            sock = self._bind_socket(port)
            bound_port = sock.getsockname()[1]

            config = uvicorn.Config(
                app,
                host=self.host,
                port=bound_port,
                log_level=self.log_level,
                log_config=None,
                access_log=False,
                lifespan="off"
            )
            server = uvicorn.Server(config)

            thread = threading.Thread(
                target=server.run,
                kwargs={'sockets': [sock]},
                name=f"pactstub-listener-{bound_port}",
                daemon=True
            )
            thread.start()

            deadline = time.monotonic() + self.startup_timeout
            while not server.started:
                if not thread.is_alive() or time.monotonic() > deadline:
                    server.should_exit = True
                    thread.join(timeout=self.startup_timeout)
                    sock.close()
                    raise PortUnavailable(bound_port, "listener failed to start")
                time.sleep(0.01)

            self._socket = sock
            self._server = server
            self._thread = thread
            self.port = bound_port

        self.logger.info(f"Listening on http://{self.host}:{bound_port}")
        return bound_port

    def _bind_socket(self, port: int) -> socket.socket:
        family = socket.AF_INET6 if ':' in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        # TIME_WAIT leftovers may be reused; an active listener still blocks the bind
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, port))
            sock.listen(128)
        except OSError as e:
            sock.close()
            self.logger.error(f"Failed to bind {self.host}:{port}: {e}")
            raise PortUnavailable(port, str(e)) from e
        sock.set_inheritable(True)
        return sock

    def unbind(self):
        """
        Stop serving and release the port.

        Safe to call from any thread and more than once. Requests already in
        flight are allowed to finish; no new connections are accepted.
        """
        with self._lock:
            server, thread, sock = self._server, self._thread, self._socket
            port = self.port
            self._server = None
            self._thread = None
            self._socket = None
            self.port = None

        if server is None:
            return

        server.should_exit = True
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.startup_timeout)
            if thread.is_alive():
                self.logger.warning(f"Listener on port {port} did not stop within {self.startup_timeout}s")
        if sock is not None:
            sock.close()

        self.logger.info(f"Released port {port}")
