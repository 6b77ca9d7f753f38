import logging
import os

from fastapi import FastAPI

from amlich.api.public import router as public_router

LOG_FORMAT = "%(asctime)s  [%(levelname)s]  %(name)s › %(message)s"
AMLICH_LOG_LEVEL_ENV = "AMLICH_LOG_LEVEL"


def setup_logging() -> None:
    """Root logging for the service entry point; library modules never call this."""
    level_name = os.environ.get(AMLICH_LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)


setup_logging()

app = FastAPI(title="amlich public api")
app.include_router(public_router)
