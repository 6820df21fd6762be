import os

# Required in production; a missing value fails fast at startup.
SECRET_KEY = os.environ["SECRET_KEY"]
JWT_SECRET = os.environ.get("JWT_SECRET", SECRET_KEY)
TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "24"))

DB_CONFIG = {
    "host": os.environ["DB_HOST"],
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.environ["DB_USER"],
    "password": os.environ["DB_PASSWORD"],
    "database": os.getenv("DB_NAME", "smartkid"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = False
