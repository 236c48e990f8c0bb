"""HTTP entry point for the scenario compiler.

Serve with any ASGI server, e.g. ``uvicorn src.main:app``.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.routes.compile import router as compile_router
from src.transpiler import TranspilerConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# SCENARIO_* defaults may come from a .env beside the project root
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = TranspilerConfig.from_env()
    logger.info(f"Scenario compiler listening on port {os.getenv('PORT', '8080')}")
    logger.info(
        f"Compile defaults: strict_mode={config.strict_mode}, "
        f"allow_unknown_components={config.allow_unknown_components}, "
        f"emit_default_styles={config.emit_default_styles}"
    )
    logger.info(f"{len(config.component_registry)} registered component type(s)")
    yield
    logger.info("Scenario compiler stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application with CORS and the compile routes."""
    application = FastAPI(
        title="Scenario Compiler",
        description="Compiles TSX scenarios to portable JSON documents",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(compile_router)

    @application.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return application


app = create_app()
