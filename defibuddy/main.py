from dotenv import load_dotenv
from fastapi import FastAPI
import logging
import os

load_dotenv()

from .config.logging_config import setup_logging
from .config.env_validation import validate_environment

setup_logging()
logger = logging.getLogger(__name__)

validate_environment()

from .api import api_router
from .cache import cache
from .config.cors_config import setup_cors
from .config.rate_limit_config import limiter
from .database.config import db_config
from .error_handlers import register_exception_handlers
from .middleware.logging_middleware import LoggingMiddleware

# Initialize FastAPI app
app = FastAPI(
    title="DefiBuddy API",
    description="Crypto portfolio discovery, Uniswap deployment and buddy fund ledger",
    version="1.0.0"
)

setup_cors(app)
app.add_middleware(LoggingMiddleware)

app.state.limiter = limiter
register_exception_handlers(app)

app.include_router(api_router, prefix="/api")


@app.on_event("startup")
def create_tables():
    db_config.create_all_tables()
    logger.info("Database tables ready")


@app.get("/")
async def root():
    return {"message": "DefiBuddy API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    """Liveness plus database and cache status"""
    database_ok = db_config.test_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unavailable",
        "cache": cache.cache_type,
    }


def run():
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
