from contextlib import asynccontextmanager
from fastapi import FastAPI
from dotenv import load_dotenv
import logging

# Load environment variables from .env file FIRST
load_dotenv()

from medrecords.config import get_settings
from medrecords.database import get_store
from medrecords.routers import appointments, auth, departments, doctors, patients, pharmacy, prescriptions
from medrecords.seed_admin import ensure_admin_account

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    current = get_settings()
    store = get_store()
    store.initialize()
    if current.admin_username and current.admin_password:
        ensure_admin_account(store, current.admin_username, current.admin_password, current.bcrypt_rounds)
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="MedRecords API",
        description="Hospital back-office records over flat files",
        version="0.1.0",
        lifespan=lifespan
    )

    app.include_router(auth.router)
    app.include_router(doctors.router)
    app.include_router(patients.router)
    app.include_router(appointments.router)
    app.include_router(prescriptions.router)
    app.include_router(pharmacy.router)
    app.include_router(departments.router)

    @app.get("/")
    def root():
        return {"message": "MedRecords API", "version": "0.1.0"}

    @app.get("/health")
    def health():
        return {"status": "healthy", "data_dir": str(get_store().data_dir)}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("medrecords.main:app", host="0.0.0.0", port=8000, reload=True)
