"""Flask application factory for the status API."""
import logging
import threading

from flask import Flask
from flask_restx import Api
from werkzeug.serving import make_server

from signalmice.config.config import get_config
from signalmice.controllers.status_controller import api as status_api

logger = logging.getLogger(__name__)


def create_app(control_loop=None, identity=None, config=None):
    """Create and configure the Flask application."""
    config = config or get_config()

    app = Flask(__name__)
    app.config.from_object(config)
    app.config['CONTROL_LOOP'] = control_loop
    app.config['IDENTITY'] = identity

    # Create API with Swagger documentation
    api = Api(
        app,
        title=config.API_TITLE,
        version=config.API_VERSION,
        description=config.API_DESCRIPTION,
        doc="/docs/",  # Swagger UI endpoint
        prefix="/api/v1",
    )

    api.add_namespace(status_api, path="/status")

    # Health check endpoint
    @app.route("/")
    @app.route("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": config.API_TITLE,
            "version": config.API_VERSION,
        }

    return app


class StatusServer:
    """Serve the status API from a daemon thread."""

    def __init__(self, app, host: str, port: int):
        self._server = make_server(host, port, app, threaded=True)
        self._thread = threading.Thread(
            target=self._server.serve_forever, daemon=True, name="StatusServer"
        )

    @property
    def port(self) -> int:
        return self._server.server_port

    def start(self):
        self._thread.start()
        logger.info("Status API listening on port %s", self.port)

    def stop(self):
        self._server.shutdown()
        self._thread.join(timeout=5)
        logger.info("Status API stopped")
