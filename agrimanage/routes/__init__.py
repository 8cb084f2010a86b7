# =============================================================================
# AgriManage Backend
# routes/__init__.py - Routes Package
#
# This package contains all API route blueprints organized by feature.
# =============================================================================

from .auth import auth_bp
from .plants import plants_bp
from .diseases import diseases_bp
from .locations import locations_bp
from .crops import crops_bp
from .calculator import calculator_bp
from .users import users_bp

__all__ = [
    'auth_bp',
    'plants_bp',
    'diseases_bp',
    'locations_bp',
    'crops_bp',
    'calculator_bp',
    'users_bp'
]
