import os
from pathlib import Path
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Override=True so edits to .env take effect on process reload.
#
# Tests point DATABASE_URL at a temporary SQLite file; set DISABLE_DOTENV=1 so a
# developer's .env can't override it.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)

# -------------------- Database --------------------
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "gigconnect")


def _build_database_url() -> str:
    raw = (os.getenv("DATABASE_URL") or "").strip()
    if raw:
        return raw

    # MySQL only when a host was configured explicitly; otherwise fall back to a
    # local SQLite file so the backend starts out-of-the-box.
    if (os.getenv("DB_HOST") or "").strip():
        password = quote_plus(DB_PASSWORD) if DB_PASSWORD else ""
        credentials = f"{DB_USER}:{password}" if password else DB_USER
        return f"mysql+pymysql://{credentials}@{DB_HOST}/{DB_NAME}"

    default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
    return f"sqlite:///{default_sqlite_path}"


DATABASE_URL = _build_database_url()

# -------------------- Auth / JWT --------------------
# NOTE: keep a default for local dev so the server can boot even if JWT_SECRET isn't set.
# Changing it invalidates every token issued so far.
JWT_SECRET = os.getenv("JWT_SECRET", "dev_secret_change_me")
# Tests lower this to keep hashing fast.
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12") or "12")

# -------------------- HTTP server --------------------
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:3000")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000") or "5000")
LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()
