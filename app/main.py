from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.assets import router as assets_router
from app.api.sla_policies import router as sla_policies_router
from app.api.system_logs import router as system_logs_router
from app.api.tickets import router as tickets_router
from app.core.config import get_settings
from app.core.logging import setup_logging

settings = get_settings()
setup_logging(settings.log_level)

app = FastAPI(title=f"{settings.app_name} Backend (MongoDB)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assets_router)
app.include_router(tickets_router)
app.include_router(sla_policies_router)
app.include_router(system_logs_router)


@app.get("/")
def root():
    return {"ok": True, "docs": "/docs"}
