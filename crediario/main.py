from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crediario.config import CORS_ORIGINS, setup_logging
from crediario.infra.db import engine
from crediario.infra.models import Base

from crediario.api.routers.credit_sales import router as credit_sales_router
from crediario.api.routers.reports import router as reports_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Crediario API")


@app.on_event("startup")
def _startup() -> None:
    setup_logging()
    logger.info("creating tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("tables created/checked")


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(credit_sales_router, prefix="/credit-sales", tags=["credit-sales"])
app.include_router(reports_router, prefix="/reports", tags=["reports"])
