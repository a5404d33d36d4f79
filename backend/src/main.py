"""CalorieTrack Server - Entry point.

Runs the MCP server with HTTP transport behind a small Starlette app.
"""

import logging

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from .shell.config import AppConfig
from .shell.food_search import FoodSearchClient
from .shell.mcp_server import mcp, set_search_client, set_store
from .shell.storage import CalorieStore, create_backend


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "calorietrack"})


def create_app(config: AppConfig | None = None) -> Starlette:
    """Create the Starlette application with MCP at root.

    The MCP streamable_http_app() handles /mcp/ internally when mounted at root.
    We use its lifespan context to ensure proper initialization.
    The tools use the storage backend and API keys from the given config.
    """
    config = config or AppConfig.from_env()
    set_store(CalorieStore(create_backend(config)))
    set_search_client(FoodSearchClient(config.calorie_ninjas_api_key))
    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Mount("/", app=mcp_app),
    ]

    return Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=config.cors_origins,
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )


def main() -> None:
    """Run the server."""
    config = AppConfig.from_env()
    logger.info("Starting CalorieTrack server on %s:%d (storage: %s)", config.host, config.port, config.storage)
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
