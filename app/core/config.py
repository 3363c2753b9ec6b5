import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./galaxy_mev.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ✅ Auth strategy: "telegram" (initData) or "jwt" (bearer token)
AUTH_STRATEGY = os.getenv("AUTH_STRATEGY", "telegram").lower()

# ✅ Telegram
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
INIT_DATA_MAX_AGE_SECONDS = int(os.getenv("INIT_DATA_MAX_AGE_SECONDS", "86400"))

# ✅ CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

# ✅ Plans & accrual
DEFAULT_PLAN_DAYS = int(os.getenv("DEFAULT_PLAN_DAYS", "30"))
APPLY_BOOSTERS_TO_ACCRUAL = os.getenv("APPLY_BOOSTERS_TO_ACCRUAL", "true").lower() in ("1", "true", "yes")
MAX_BOT_DATA_POINTS = int(os.getenv("MAX_BOT_DATA_POINTS", "500"))
