"""FastAPI application entrypoint for the Nicotine Circuit Lab."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import router as session_router
from .config import DEFAULT_TELEMETRY_CONFIG
from .telemetry import configure_telemetry

LOGGER = logging.getLogger(__name__)


API_DESCRIPTION = """
The Nicotine Circuit API drives a didactic simulation of nicotine acting on
α4β2 and α7 receptors in a simplified dopamine/GABA reward circuit.  The
service keeps one session and exposes endpoints to:

* load a scenario or reset the session (`/session/preset`, `/session/reset`)
* trigger a manual puff (`/session/puff`)
* advance the continuous loop one frame (`/session/tick`)
* fast-forward sixty minutes (`/session/advance`)
* tune kinetic parameters and the puff rate (`/session/params`, `/session/puff-rate`)
* read the timeline and recovery clocks (`/session/trace`, `/session/recovery/{pathway}`)
"""


telemetry = configure_telemetry(DEFAULT_TELEMETRY_CONFIG)


app = FastAPI(title="Nicotine Circuit API", description=API_DESCRIPTION, version=__version__)
telemetry.instrument_app(app)


origins = os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(session_router)
LOGGER.info("Nicotine Circuit API ready (telemetry=%s)", telemetry.enabled)


@app.get("/")
def read_root() -> dict[str, str]:
    """Basic health check used by the front-end shell."""

    return {"status": "ok", "version": __version__}


@app.get("/health")
def health() -> dict[str, str]:
    """Alias of :func:`read_root` for compatibility with uptime monitors."""

    return {"status": "ok", "version": __version__}


__all__ = ["app"]
