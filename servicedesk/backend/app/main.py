# servicedesk/backend/app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import config
from .api.v1.requests import router as requests_router
from .api.v1.users import router as users_router
from .db import SessionLocal
from .errors import ServiceDeskError
from .seed import seed_admin, seed_statuses

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()

app = FastAPI(title="Service Desk")
app.include_router(requests_router)
app.include_router(users_router)


@app.exception_handler(ServiceDeskError)
async def service_error_handler(request: Request, exc: ServiceDeskError):
    if exc.status_code >= 409:
        logger.warning("%s %s -> %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Seed statuses + first admin

@app.on_event("startup")
def seed_initial_data():
    db = SessionLocal()
    try:
        seed_statuses(db)
        seed_admin(db, config.SEED_ADMIN_EMAIL, config.SEED_ADMIN_PASSWORD)
    finally:
        db.close()


@app.get("/health")
def health_check():
    return {"status": "ok"}
