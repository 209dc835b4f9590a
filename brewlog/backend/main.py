import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .db import create_db_and_tables
from .errors import register_exception_handlers
from .routers import analytics, brew_sessions, coffee_beans, equipment, grind_settings

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("brewlog")

app = FastAPI(title="BrewLog API", version=settings.version)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(coffee_beans.router)
app.include_router(grind_settings.router)
app.include_router(equipment.router)
app.include_router(brew_sessions.router)
app.include_router(analytics.router)


@app.on_event("startup")
def on_startup() -> None:
    create_db_and_tables()
    logger.info("BrewLog API %s started (database=%s)", settings.version, settings.database_url)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("brewlog.backend.main:app", host="127.0.0.1", port=8000, reload=True)
