"""
app/routers — FastAPI Routers Module
======================================

Purpose:
  Modular router definitions for organized endpoint management.

Routers:
  - public: read-only portfolio endpoints (no token)
  - manage: create/update/delete endpoints, mounted behind the bearer gate
"""
