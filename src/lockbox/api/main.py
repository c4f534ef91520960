# Lockbox API - FastAPI application
#
# Local-only HTTP backend for the desktop shell. Binds to 127.0.0.1 by
# default; every vault route also requires the per-process API token.

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from .security import initialize_api_token
from .vault_routes import get_vault_commands, router as vault_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lockbox API",
    description="Local credential vault API",
    version=__version__,
)

# Desktop shell dev servers only
_allowed_origins = [
    "http://localhost:1420", "http://127.0.0.1:1420",
    "http://localhost:3000", "http://127.0.0.1:3000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vault_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": __version__}


def start_api_server(host: str = "127.0.0.1", port: int = 8000):
    """
    Open the vault and serve the API until interrupted.

    Args:
        host: Host to bind to (default: localhost only for security)
        port: Port to listen on
    """
    token = initialize_api_token()
    commands = get_vault_commands()  # fail fast if the vault file cannot be opened
    print(f"  API token: {token}")

    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    finally:
        commands.vault.close()
