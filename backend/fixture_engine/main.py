import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fixture_engine import __version__
from fixture_engine.config import CORS_ORIGINS, LOG_LEVEL
from fixture_engine.routes import fixtures, formats

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Fixture Engine API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(fixtures.router, prefix="/api", tags=["fixtures"])
app.include_router(formats.router, prefix="/api", tags=["formats"])


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": "Fixture Engine API", "version": __version__, "status": "healthy"}
