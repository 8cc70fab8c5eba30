"""Run the cleaning rota service with uvicorn."""

from __future__ import annotations

import logging
import os

import uvicorn

from cleaning_rota.settings import settings


if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("CLEANING_ROTA_HOST", "0.0.0.0")
    port = int(os.environ.get("CLEANING_ROTA_PORT", "8099"))
    uvicorn.run("cleaning_rota.main:app", host=host, port=port, reload=False, log_level=settings.log_level.lower())
