from fastapi import FastAPI

from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.api.routes.matchups import router as matchups_router
from app.api.routes.picks import router as picks_router
from app.api.routes.cron import router as cron_router

app = FastAPI(title="Loser Pool")
app.include_router(matchups_router)
app.include_router(picks_router)
app.include_router(cron_router)

@app.on_event("startup")
def on_startup():
    setup_logging()
    init_db()

@app.get("/health")
def health():
    return {"ok": True}
