from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
import os

# Flask extensions singletons

db = SQLAlchemy()
migrate = Migrate()

# Allowed origins for the portal front-end (comma-separated). In production avoid wildcard.
_allowed = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
_origins = [o.strip() for o in _allowed.split(",") if o.strip()] if _allowed else []
if not _origins and os.getenv("FLASK_ENV", "development").lower() != "production":
    # Vite dev server defaults
    _origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
cors = CORS(resources={r"/api/*": {"origins": _origins}})
