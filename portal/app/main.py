"""Engine entry point for host applications"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from portal.app.core.config import settings
from portal.app.core.logging import setup_logging, get_logger
from portal.app.core.security import CredentialStore
from portal.app.services.api_service import RecruitmentAPIService

logger = get_logger(__name__)


def configure() -> None:
    """Configure logging and announce the engine; call once at host start-up"""
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")


@asynccontextmanager
async def lifespan(
    credentials: Optional[CredentialStore] = None,
    **client_options
) -> AsyncIterator[RecruitmentAPIService]:
    """
    Run the engine for the lifetime of a host session

    Configures logging, then yields a RecruitmentAPIService shared by the
    wizard and the pipeline and closes it on exit.

    Args:
        credentials: Signed-in session, if any
        **client_options: Passed through to RecruitmentAPIService

    Yields:
        Open API client
    """
    configure()
    api = RecruitmentAPIService(credentials=credentials, **client_options)
    try:
        yield api
    finally:
        await api.close()
        logger.info(f"Shutting down {settings.APP_NAME}")
