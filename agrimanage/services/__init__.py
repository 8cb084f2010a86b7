# =============================================================================
# AgriManage Backend
# services/__init__.py - Services Package
#
# Business logic: persistence gateway, relationship resolver, cost
# estimation and report export. Modules are imported directly
# (agrimanage.services.<module>) to keep model imports acyclic.
# =============================================================================
