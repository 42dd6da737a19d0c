"""FastAPI entry point."""

import uvicorn

from payhook.api import create_api
from payhook.core.config import get_settings
from payhook.core.logging import get_logger, setup_logging

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)
logger = get_logger(__name__)

app = create_api(settings)
logger.info("Application configured: provider=%s", settings.payment_provider)


if __name__ == "__main__":
    uvicorn.run(
        "payhook.api_main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
