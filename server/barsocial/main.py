# main.py
import os
import logging
import uvicorn
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from fastapi import FastAPI
from barsocial.errors import register_error_handlers
from barsocial.http_api.router import router as api_router
from barsocial.http_api.rate_limiter import RateLimitMiddleware
from barsocial.http_api.logging_middleware import LoggingMiddleware
from barsocial.db.init_collections import init_mongodb
from barsocial.db.connection import close_connection

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

API_PREFIX = os.getenv("API_PREFIX", "/api")

app = FastAPI(
    title="barsocial API",
    version="1.0.0"
)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(LoggingMiddleware)

register_error_handlers(app)

app.include_router(api_router, prefix=API_PREFIX)

def env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")

def init_database():
    """Create indexes and optionally seed sample data"""
    if not env_flag("INIT_DB", "true"):
        logger.info("Skipping database initialization (INIT_DB=false)")
        return

    try:
        logger.info("Initializing database...")
        init_mongodb(drop_existing=False, insert_samples=env_flag("INSERT_SAMPLES", "false"))
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        logger.warning("Server starting without database initialization")

@app.on_event("startup")
def startup_event():
    init_database()
    logger.info("Server startup complete!")

@app.on_event("shutdown")
def shutdown_event():
    close_connection()

if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "5000")))
