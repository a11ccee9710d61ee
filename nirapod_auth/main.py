from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from nirapod_auth.api.v1 import routers
from nirapod_auth.core.config import settings
import logging
from nirapod_auth.db.session import connect_db_pool, close_db_pool

logging.basicConfig(level=settings.LOG_LEVEL)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_db_pool()
    yield
    await close_db_pool()

app = FastAPI(
    title="Nirapod Identity API",
    description="User registration, login, OTP password reset and admin identity verification",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routers.router)

@app.get("/")
async def root():
    return {"message": "Welcome to Nirapod Identity API"}

@app.get("/health")
async def health():
    return {"status": "ok"}
