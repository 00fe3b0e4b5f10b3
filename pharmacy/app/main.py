import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmacy.app.api.v1.api import api_router
from pharmacy.app.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=f"{settings.REPORT_TITLE} Reports")

# ─── CORS, restricted to configured origins ──────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
    expose_headers=["Content-Disposition"],
)

app.include_router(api_router)
