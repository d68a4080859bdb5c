# app/main.py
from dotenv import load_dotenv

load_dotenv()

import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.appconfig import settings

# Apply logging configuration
logging.config.dictConfig(settings.LOGGING_CONFIG)

# Import routers
from app.discharge_summary.routes import router as discharge_summary_router
from app.system_services.system_routes import router as system_router

# Import configurations
from app.database.connection import init_models
from config.summaryconfig import summary_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    await init_models()
    logger.info("===============================================================================")
    logger.info(f" 🚀 Starting {settings.APP_NAME}")
    logger.info(f" ✅ Summary LLM Provider: {summary_settings.LLM_PROVIDER} - {summary_settings.current_llm_model}")
    logger.info(f" ✅ Patient ID retry budget: {settings.PATIENT_ID_MAX_ATTEMPTS}")
    logger.info("===============================================================================")
    yield
    # Shutdown
    logger.info("👋 Shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="De-identified ICU ISBAR tracker with conservative suggestions and discharge summaries",
    version="1.0.0",
    lifespan=lifespan,
)

# Include routers with prefixes
app.include_router(system_router, prefix="/api", tags=["Patient Cases"])
app.include_router(discharge_summary_router, prefix="/api", tags=["Discharge Summary"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
