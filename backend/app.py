import sys
import os

# Flat imports from backend/ when served via start_server.py or uvicorn --app-dir
sys.path.insert(0, os.path.dirname(__file__))

import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from database import engine, init_db
from logging_config import setup_logging
from routes import dashboard, production, reports, rft, settings

logger = logging.getLogger(__name__)

app = FastAPI(title="Lantabur Group Production Dashboard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(production.router)
app.include_router(rft.router)
app.include_router(dashboard.router)
app.include_router(reports.router)
app.include_router(settings.router)


@app.on_event("startup")
def on_startup():
    setup_logging()
    init_db()
    logger.info("Dashboard API started (%s database)", engine.dialect.name)


@app.get("/health")
def health_check():
    """Liveness probe for the hosting platform's uptime monitor."""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}
