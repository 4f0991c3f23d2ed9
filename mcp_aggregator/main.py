import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from .config import get_settings
from .database import engine, Base, RegistrySession
from .logging_config import configure_logging
from .auth.exceptions import AuthenticationError, MCPGatewayError
from .catalog.cache import CatalogCache
from .registry.models import UpstreamServer, ServerEnablement  # noqa: F401 - Import so Base.metadata sees them
from .registry.service import sync_servers_from_config
from .registry.exceptions import ServerNotFoundError
from .registry.router import router as registry_router
from .gateway.router import router as gateway_router

settings = get_settings()

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    # Startup: Create tables (simplistic migration)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with RegistrySession() as session:
        await sync_servers_from_config(session, settings.UPSTREAM_CONFIG_PATH)

    # Initialize global HTTP client for connection pooling
    # timeouts=None removes global default timeout, allowing per-request timeouts
    app.state.http_client = httpx.AsyncClient(timeout=None)

    if settings.CATALOG_CACHE_TTL_SECONDS > 0:
        app.state.catalog_cache = CatalogCache(
            ttl_seconds=settings.CATALOG_CACHE_TTL_SECONDS,
            maxsize=settings.CATALOG_CACHE_MAXSIZE,
        )
    else:
        app.state.catalog_cache = None

    yield

    # Shutdown: Close database connection and HTTP client
    await app.state.http_client.aclose()
    await engine.dispose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Global exception handlers
@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    base_url = f"{request.url.scheme}://{request.url.netloc}"
    return JSONResponse(
        status_code=401,
        content={"error": exc.code, "message": exc.message},
        headers={
            "WWW-Authenticate": (
                'Bearer error="unauthorized", '
                'error_description="Authorization needed", '
                f'resource_metadata="{base_url}/.well-known/oauth-protected-resource"'
            )
        },
    )

@app.exception_handler(ServerNotFoundError)
async def server_not_found_handler(request: Request, exc: ServerNotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": exc.code, "message": exc.message}
    )

@app.exception_handler(MCPGatewayError)
async def gateway_exception_handler(request: Request, exc: MCPGatewayError):
    return JSONResponse(
        status_code=500,
        content={"error": exc.code, "message": exc.message}
    )

@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.APP_NAME}

@app.get("/.well-known/oauth-protected-resource")
async def protected_resource_metadata(request: Request):
    """OAuth protected-resource metadata referenced by the 401 challenge."""
    base_url = f"{request.url.scheme}://{request.url.netloc}"
    authorization_server = settings.AUTHORIZATION_SERVER_URL or settings.JWT_ISSUER
    return JSONResponse(
        content={
            "resource": f"{base_url}/mcp",
            "authorization_servers": [authorization_server] if authorization_server else [],
            "bearer_methods_supported": ["header"],
            "scopes_supported": [s.strip() for s in settings.OAUTH_SCOPES.split(",") if s.strip()],
        },
        headers={"Cache-Control": "public, max-age=3600"},
    )

# Include routers
app.include_router(gateway_router)
app.include_router(registry_router)
