from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from strawberry.fastapi import GraphQLRouter

from .config import Settings, settings as default_settings
from .graphql_schema import get_context, schema
from .llm_service import ChatProxy
from .logging_conf import setup_logging
from .middlewares import log_requests, make_cors_middleware
from .utils import ErrorClassifier, classify_provider_error

logger = structlog.get_logger()


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    classifier: ErrorClassifier = classify_provider_error,
) -> FastAPI:
    """Build the application. `transport` replaces the network layer of the
    upstream client (tests pass an httpx.MockTransport)."""
    settings = settings or default_settings

    # ---------------------------------------------------
    # Setup logging & lifespan
    # ---------------------------------------------------
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with httpx.AsyncClient(transport=transport, timeout=settings.UPSTREAM_TIMEOUT) as client:
            app.state.proxy = ChatProxy(settings.proxy_config(), client, classifier)
            logger.info(
                "app.startup",
                app=settings.APP_NAME,
                env=settings.APP_ENV,
                base_url=settings.DEEPSEEK_API_URL,
                model=settings.DEEPSEEK_MODEL,
                has_key=bool(settings.DEEPSEEK_API_KEY),
            )
            yield
        logger.info("app.shutdown")

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    # ---------------------------------------------------
    # Middlewares (last registered runs first)
    # ---------------------------------------------------
    app.middleware("http")(make_cors_middleware(settings.CORS_ALLOW_ORIGIN))
    app.middleware("http")(log_requests)

    # ---------------------------------------------------
    # Routes
    # ---------------------------------------------------
    @app.get("/health")
    async def health():
        """Simple health check."""
        return {"status": "ok"}

    graphql_app = GraphQLRouter(
        schema,
        path=settings.GRAPHQL_PATH,
        context_getter=get_context,
        graphql_ide="graphiql" if settings.ENABLE_GRAPHIQL else None,
    )
    app.include_router(graphql_app)

    return app


app = create_app()
