#!/usr/bin/env python3
"""Main entry point for the signalmice agent."""
import logging
import sys

import redis

from signalmice import __version__
from signalmice.app import create_app, StatusServer
from signalmice.config.config import get_config
from signalmice.models.identity import AgentIdentity
from signalmice.repositories.signal_repository import SignalRepository
from signalmice.services.audit_service import attach_audit_handler
from signalmice.services.command_runner import SubprocessCommandRunner
from signalmice.services.control_loop_service import ControlLoop
from signalmice.services.shutdown_service import HostShutdownMethods, ShutdownOrchestrator
from signalmice.services.signal_watcher_service import SignalWatcher

logger = logging.getLogger(__name__)


def main():
    """Watch Redis for the signal key until SIGINT/SIGTERM; return the exit status."""
    config = get_config()
    config.init_logging()

    identity = AgentIdentity.resolve(config)
    audit_handler = attach_audit_handler(config, identity)

    logger.info(
        "%s starting", config.SERVICE_NAME,
        extra={"fields": {
            "version": __version__,
            "check_interval": f"{config.CHECK_INTERVAL}s",
            "redis_key": config.REDIS_KEY,
        }},
    )

    repository = SignalRepository.from_config(config)
    status_server = None
    control_loop = None
    try:
        try:
            repository.ping()
        except redis.RedisError as e:
            logger.error("Failed to connect to Redis at %s: %s", config.redis_addr(), e,
                         extra={"fields": {"error": str(e)}})
            return 1

        logger.info("Connected to Redis successfully")

        runner = SubprocessCommandRunner(timeout=config.COMMAND_TIMEOUT)
        methods = HostShutdownMethods(runner, config.HOST_PROC_PATH).default_methods()
        control_loop = ControlLoop(
            watcher=SignalWatcher(repository),
            orchestrator=ShutdownOrchestrator(methods),
            interval=config.CHECK_INTERVAL,
        )
        control_loop.install_signal_handlers()

        if config.STATUS_API_ENABLED:
            app = create_app(control_loop, identity, config)
            status_server = StatusServer(app, config.HOST, config.PORT)
            status_server.start()

        control_loop.run()
        return 0
    finally:
        repository.close()
        if control_loop is not None:
            control_loop.close()
        if status_server is not None:
            status_server.stop()
        if audit_handler is not None:
            logging.getLogger().removeHandler(audit_handler)
            audit_handler.close()


if __name__ == '__main__':
    sys.exit(main())
