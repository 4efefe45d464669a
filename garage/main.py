# garage/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError

from garage.config import get_settings
from garage.routes.attendance import router as attendance_router
from garage.routes.locations import router as locations_router
from garage.services.attendance import RecordNotFoundError

logging.basicConfig(
    level=get_settings().LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(title="Garage Attendance", version="1.0.0")


# Healthcheck
@app.get("/healthz")
def healthcheck():
    return {"ok": True}


# ── Store errors ──────────────────────────────────────────────────────────────
@app.exception_handler(APIError)
async def store_error(request: Request, exc: APIError):
    log.error("Store error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content={"detail": exc.message or "Store request failed"})


@app.exception_handler(RecordNotFoundError)
async def not_found(request: Request, exc: RecordNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(attendance_router)
app.include_router(locations_router)
