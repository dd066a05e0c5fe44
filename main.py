import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config.settings import settings
from infrastructure.db.sqlite import init_db
from infrastructure.web.controllers.admin_controller import router as admin_router
from infrastructure.web.controllers.auth_controller import router as auth_router
from infrastructure.web.controllers.content_controller import router as content_router
from infrastructure.web.controllers.deposit_controller import router as deposit_router
from infrastructure.web.controllers.rate_controller import router as rate_router
from infrastructure.web.controllers.transfer_controller import router as transfer_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Remittance wallet")

# от CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# чеки и KYC-фото отдаются как статика
app.mount(settings.STORAGE_PUBLIC_URL, StaticFiles(directory=settings.STORAGE_DIR, check_dir=False), name="storage")


@app.on_event("startup")
def on_startup():
    init_db(settings.DB_PATH)
    Path(settings.STORAGE_DIR).mkdir(parents=True, exist_ok=True)


app.include_router(auth_router)
app.include_router(transfer_router)
app.include_router(deposit_router)
app.include_router(rate_router)
app.include_router(content_router)
app.include_router(admin_router)
