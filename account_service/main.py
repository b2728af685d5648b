from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from account_service.api.routers.auth import router as auth_router
from account_service.api.routers.payments import router as payments_router
from account_service.api.routers.sessions import router as sessions_router
from account_service.api.routers.users import router as users_router
from account_service.shared.config import get_settings
from account_service.shared.log import configure_logging


settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Account API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(payments_router)
app.include_router(sessions_router)


@app.get("/api/healthchecker")
def healthchecker():
    return {"status": "success", "message": "Account API is running"}
