"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    cd backend
    uvicorn api.server:app --reload --port 8000

Endpoints:
    GET  /v1/health
    POST /v1/itinerary/plan
    POST /v1/itinerary/optimize-route
    GET  /v1/advice/rail-pass
    GET  /v1/advice/day-trip
    GET  /v1/advice/meal-gap
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from api.routes import advice, health, itinerary

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Itinerary Scheduling API",
    version="1.0.0",
    description=(
        "Route ordering, time-window scheduling and travel advisories "
        "(meal gaps, day trips, rail pass) for multi-day itineraries."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow the web frontend (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router,     prefix="/v1",           tags=["Health"])
app.include_router(itinerary.router,  prefix="/v1/itinerary", tags=["Itinerary"])
app.include_router(advice.router,     prefix="/v1/advice",    tags=["Advice"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host=config.API_HOST, port=config.API_PORT, reload=True)
