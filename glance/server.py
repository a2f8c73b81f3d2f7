"""
Process entry point: resolve settings, connect to the cluster, serve.

The process refuses to start without a probed cluster connection.
"""

import sys

import structlog
import uvicorn
from dotenv import load_dotenv

from glance.config import get_settings
from glance.core.logging import setup_logging
from glance.exceptions import ClusterConnectionError
from glance.main import create_app
from glance.services.k8s import connect_cluster


logger = structlog.get_logger(__name__)


def main() -> None:
    load_dotenv()
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)

    try:
        host, port = settings.listen_address()
    except ValueError as exc:
        logger.error("server.invalid_address", error=str(exc))
        sys.exit(2)

    try:
        cluster = connect_cluster(settings)
    except ClusterConnectionError as exc:
        logger.error("server.cluster_unavailable", error=str(exc))
        sys.exit(1)

    app = create_app(cluster, settings)
    logger.info("server.starting", host=host, port=port, environment=settings.environment)
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        log_config=None,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    main()
