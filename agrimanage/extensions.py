# =============================================================================
# AgriManage Backend
# extensions.py - Flask Extensions Initialization
#
# This module initializes Flask extensions without the app instance to prevent
# circular imports. Extensions are initialized with the app in the factory.
# =============================================================================

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# =============================================================================
# Database ORM
# =============================================================================
db = SQLAlchemy()

# =============================================================================
# Database Migrations
# Alembic-based migrations for schema version control
# =============================================================================
migrate = Migrate()

# =============================================================================
# JWT Authentication
# Identifies the requesting user on write paths and calculator history
# =============================================================================
jwt = JWTManager()

# =============================================================================
# Password Hashing
# =============================================================================
bcrypt = Bcrypt()

# =============================================================================
# Cross-Origin Resource Sharing
# Enables the single-page frontend to call the API from another origin
# =============================================================================
cors = CORS()

# =============================================================================
# Rate Limiting
# =============================================================================
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per hour"],
    storage_uri="memory://",
    strategy="fixed-window"
)
