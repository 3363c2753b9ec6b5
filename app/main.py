import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ✅ Import All API Routes
from app.api.routes import auth, plan, bot_data, boosters, transactions, system

from app.core.config import CORS_ORIGINS, LOG_LEVEL, RUN_MIGRATIONS
from app.core.errors import CoreError, core_error_handler
from app.core.logging_config import setup_logging

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)


# ============================================
# ✅ DATABASE SETUP
# ============================================

def prepare_database():
    if RUN_MIGRATIONS:
        from app.db.migrate import run_migrations
        run_migrations()
    else:
        from app.db.init_db import init_db
        init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    prepare_database()
    logger.info("Galaxy MEV API started")
    try:
        yield
    finally:
        logger.info("Galaxy MEV API stopping")


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="Galaxy MEV", lifespan=lifespan)

# ✅ CORS: only the mini app frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)

# ✅ Typed service errors -> {"error": {"code", "message"}}
app.add_exception_handler(CoreError, core_error_handler)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(plan.router)
app.include_router(bot_data.router)
app.include_router(boosters.router)
app.include_router(transactions.router)
app.include_router(system.router)


# ============================================
# ✅ HEALTH CHECK ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"status": "Hello Galaxy MEV Telegram Mini App!"}
