from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import RequestIDMiddleware, init_logging
from app.routers.auth import router as auth_router
from app.routers.candidates import router as candidates_router
from app.routers.confirmations import router as confirmations_router
from app.routers.audit import router as audit_router
from app.routers.accounts import router as accounts_router
from app.routers.google_calendar import router as google_calendar_router

init_logging(settings.log_level)

app = FastAPI(title="Group Consultation Scheduler API")

# Comma-separated list, e.g.:
# CORS_ORIGINS="http://localhost:3000,https://consult-scheduler.example.com"
allow_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

# Safe fallback for local dev if env var not set
if not allow_origins:
  allow_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
  ]

app.add_middleware(
  CORSMiddleware,
  allow_origins=allow_origins,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(confirmations_router, tags=["confirmations"])
app.include_router(candidates_router, prefix="/candidates", tags=["candidates"])
app.include_router(audit_router, prefix="/audit-logs", tags=["audit"])
app.include_router(accounts_router, prefix="/admin", tags=["admin"])
app.include_router(google_calendar_router, prefix="/google-calendar", tags=["google-calendar"])

@app.get("/health")
def health():
  return {"status": "ok"}
