import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statusmaker import models  # noqa: F401  registers every table on Base.metadata
from statusmaker.api import assets, auth, catalog, categories, dashboard, editor, templates
from statusmaker.core.config import settings
from statusmaker.core.database import Base, SessionLocal, engine
from statusmaker.core.error_handlers import register_error_handlers
from statusmaker.services.category_service import seed_default_categories

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables and seed default categories
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    if settings.SEED_DEFAULTS:
        db = SessionLocal()
        try:
            categories_seeded = seed_default_categories(db)
            logger.info(f"Default categories ready ({len(categories_seeded)})")
        except Exception as e:
            logger.error(f"Error seeding default categories: {e}")
        finally:
            db.close()

    logger.info("=" * 50)
    logger.info("StatusMaker API started successfully!")
    logger.info("=" * 50)
    yield
    logger.info("StatusMaker API shutting down")


# Create FastAPI app
app = FastAPI(
    title="StatusMaker API",
    description="Video status templates: admin management and end-user customization",
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# Configure CORS - MUST be before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register error handlers
register_error_handlers(app)

# Include routers
# Admin
app.include_router(auth.router)  # Login, current admin
app.include_router(categories.router)
app.include_router(templates.router)
app.include_router(assets.router)
app.include_router(dashboard.router)

# Public
app.include_router(catalog.router)  # Categories and published templates
app.include_router(editor.router)  # Preview, export, renderer callbacks


# Health check endpoint
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": "0.1.0",
        "service": "statusmaker-api"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "statusmaker.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.DEBUG,
    )
