# ============================================================================
# API MODULE
# ============================================================================
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for the SLD store
# CREATED: 18 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for template ingestion and config values.
"""

from .sld_routes import router, set_sld_services

__all__ = [
    "router",
    "set_sld_services",
]
