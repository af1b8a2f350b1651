"""
UploadFiles Server - Main FastAPI Application

This module contains the main FastAPI application for the UploadFiles server.
It manages REST API endpoints for folders and files stored under the uploads
root, local import/export and blob import.
"""

import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from auth import CreateAuthenticator
from blob_bridge import CreateBlobStore
from file_storage import InitializeStorage
from server_config import LoadServerConfig, ServerConfig

logger = logging.getLogger(__name__)


# ==================== Logging ====================

def ConfigureLogging(log_dir: str = "logs", level: str = "INFO") -> Path:
    """
    Configure logging to write to both console and file

    Args:
        log_dir: Directory receiving the log files (created if missing)
        level: Root log level name

    Returns:
        Path: Log file of the day
    """
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    # Create log filename with timestamp
    log_filename = logs_dir / f"uploadfiles-server-{datetime.now().strftime('%Y-%m-%d')}.log"

    # Configure logging with both console and file handlers
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            # Console handler
            logging.StreamHandler(),
            # File handler with rotation (max 10MB per file, keep 10 backup files)
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )
    return log_filename


# ==================== Lifespan Events ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler for startup and shutdown
    Configures logging and prepares the uploads root
    """
    config: ServerConfig = app.state.config

    # Startup
    ConfigureLogging(config.log_dir, config.log_level)
    logger.info("UploadFiles Server starting up...")

    InitializeStorage(config.uploads_path)
    logger.info(f"Authentication mode: {config.auth_mode}")
    if app.state.blob_store is None:
        logger.info("Blob import disabled (no blob token)")

    logger.info("Server startup complete")

    yield

    # Shutdown
    logger.info("UploadFiles Server shutting down...")
    close = getattr(app.state.blob_store, "close", None)
    if close:
        close()
    logger.info("Shutdown complete")


# ==================== FastAPI Application ====================

def CreateApp(config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        config: Server configuration (loaded from file and environment when omitted)

    Returns:
        FastAPI: Application with routers, CORS middleware and state
                 (config, authenticator, blob_store)
    """
    if config is None:
        config = LoadServerConfig()

    app = FastAPI(
        title="UploadFiles Server",
        description="File manager for an uploads directory: folders, uploads, import/export and blob import",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.config = config
    app.state.authenticator = CreateAuthenticator(config)
    app.state.blob_store = CreateBlobStore(config)

    # ==================== CORS Middleware ====================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== Include Routers ====================

    from routes import status, auth, folders, files, operations, transfers, blobs, display

    app.include_router(status.router)
    app.include_router(auth.router)
    app.include_router(folders.router)
    app.include_router(files.router)
    app.include_router(operations.router)
    app.include_router(transfers.router)
    app.include_router(blobs.router)
    app.include_router(display.router)

    return app


app = CreateApp()


# ==================== Main Entry Point ====================

if __name__ == "__main__":
    """
    Run the server using uvicorn
    """
    logger.info("Starting UploadFiles Server...")

    # reload=False: Auto-reload disabled to prevent spurious log messages from
    #               file monitoring. Manually restart server after code changes.
    uvicorn.run(
        "server:app",
        host=app.state.config.host,
        port=app.state.config.port,
        reload=False,
        log_level=app.state.config.log_level.lower()
    )
