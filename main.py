# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import logging
import os

from fastapi import FastAPI

from core.database import engine, Base

# Import all models to register them
from models.user import User  # noqa: F401
from models.project import Project  # noqa: F401
from models.load import Load, Skid  # noqa: F401
from models.audit_log import AuditLog  # noqa: F401

from api import admin, audit, auth, inventory, loader, loads, projects, truck_loads

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
log = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="Load Builder",
    description="Skid inventory staging and truck load assembly for project sites",
    version="1.0.0"
)

# Register routers
app.include_router(auth.router)
app.include_router(projects.router, prefix="/api")
app.include_router(inventory.router, prefix="/api")
app.include_router(truck_loads.router, prefix="/api")
app.include_router(loader.router, prefix="/api")
app.include_router(loads.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
app.include_router(audit.router, prefix="/api")


# ==================== HEALTH CHECK ====================
@app.get("/health")
def health_check():
    """Health check endpoint for Docker and Kubernetes."""
    return {
        "status": "healthy",
        "service": "Load Builder",
        "version": "1.0.0"
    }


# ==================== API: HEALTH CHECK ====================
@app.get("/api/health")
def api_health():
    """API health check endpoint."""
    return {
        "status": "operational",
        "version": "1.0.0",
        "service": "Load Builder"
    }


if __name__ == "__main__":
    import uvicorn

    log.info("Starting Load Builder on port %s", os.getenv("PORT", "8000"))
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
