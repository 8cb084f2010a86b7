# =============================================================================
# AgriManage Backend
# __init__.py - Package Root
#
# REST backend for plants, plant diseases, farm locations, crop allocations
# and the crop cost calculator.
# =============================================================================

from agrimanage.app import create_app

__version__ = '1.0.0'

__all__ = ['create_app', '__version__']
