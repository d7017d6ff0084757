# Routes package init
"""
Trophy API - Routes Package
=============================

Route Inventory:
    - health.py:    GET    /api/health             (liveness probe)
    - trophies.py:  GET    /api/trophies           (list, newest first)
                    POST   /api/trophies           (create)
                    DELETE /api/trophies/{id}      (delete)

Routes stay thin: validation lives in services.validation and persistence in
services.trophy_store.
"""
