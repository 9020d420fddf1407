"""
Per-user encryption service

A FastAPI application that encrypts user data at rest with per-user keys.
The user is identified by the identity-provider subject claim, which the
frontend login flow passes in the X-User-Sub header.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, HTTPException, Header

from .config import config, VERSION
from .errors import (
    InvalidInput,
    MissingConfiguration,
    InvalidEnvelope,
    AuthenticationFailed,
)
from .user_data import UserDataCipher

logger = logging.getLogger(__name__)


# Global state
class AppState:
    """Application state container."""
    cipher: Optional[UserDataCipher] = None


app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    app_state.cipher = UserDataCipher(config)

    if config.has_encryption_secret:
        logger.info("Encryption secret configured")
    else:
        # Not fatal: each encryption request reports the missing setting
        logger.warning("ENCRYPTION_SECRET is not set - encryption requests will fail")

    yield

    # Shutdown
    app_state.cipher = None


# Create FastAPI app
app = FastAPI(
    title="UserCrypt",
    description="Per-user encryption of data at rest",
    version=VERSION,
    lifespan=lifespan,
)


def get_cipher() -> UserDataCipher:
    """Get the active cipher (outside the lifespan, e.g. in tests, use the config)."""
    if app_state.cipher is None:
        app_state.cipher = UserDataCipher(config)
    return app_state.cipher


def require_user_sub(x_user_sub: Optional[str]) -> str:
    """Check that the subject claim header is present."""
    if not x_user_sub:
        raise HTTPException(status_code=400, detail="X-User-Sub header required")
    return x_user_sub


async def read_json_object(request: Request) -> dict:
    """Read a JSON object request body."""
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="JSON object body required")
    return data


def to_http_error(error: Exception) -> HTTPException:
    """Map an encryption layer error to an HTTP error."""
    if isinstance(error, MissingConfiguration):
        logger.error(f"Encryption unavailable: {error}")
        return HTTPException(status_code=503, detail=str(error))
    if isinstance(error, AuthenticationFailed):
        return HTTPException(status_code=403, detail="Decryption failed")
    if isinstance(error, (InvalidInput, InvalidEnvelope)):
        return HTTPException(status_code=400, detail=str(error))
    return HTTPException(status_code=500, detail="Internal error")


# ============================================================================
# Status API
# ============================================================================

@app.get("/api/status")
async def get_status():
    """Get service status."""
    settings = get_cipher().settings
    return {
        "ok": True,
        "version": VERSION,
        "encryption_configured": settings.has_encryption_secret,
    }


# ============================================================================
# Data Encryption API
# ============================================================================

@app.post("/api/data/encrypt")
async def encrypt_data(request: Request, x_user_sub: Optional[str] = Header(default=None)):
    """Encrypt text for the current user."""
    user_sub = require_user_sub(x_user_sub)
    data = await read_json_object(request)
    plaintext = data.get("plaintext")

    if not isinstance(plaintext, str):
        raise HTTPException(status_code=400, detail="plaintext (string) required")

    try:
        ciphertext = get_cipher().encrypt_for_user(user_sub, plaintext)
    except (InvalidInput, MissingConfiguration) as e:
        raise to_http_error(e)

    return {"ciphertext": ciphertext}


@app.post("/api/data/decrypt")
async def decrypt_data(request: Request, x_user_sub: Optional[str] = Header(default=None)):
    """Decrypt text for the current user."""
    user_sub = require_user_sub(x_user_sub)
    data = await read_json_object(request)
    ciphertext = data.get("ciphertext")

    if not isinstance(ciphertext, str) or not ciphertext:
        raise HTTPException(status_code=400, detail="ciphertext (string) required")

    try:
        plaintext = get_cipher().decrypt_for_user(user_sub, ciphertext)
    except AuthenticationFailed as e:
        logger.warning("Decryption rejected for request")
        raise to_http_error(e)
    except (InvalidInput, InvalidEnvelope, MissingConfiguration) as e:
        raise to_http_error(e)

    return {"plaintext": plaintext}


# ============================================================================
# Main Entry Point
# ============================================================================

def main():
    """Run the service with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        "usercrypt.app:app",
        host=config.HOST,
        port=config.PORT,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
