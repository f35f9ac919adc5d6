"""
RoomStager Backend — API Routes Package
=========================================

Route Inventory:
    - public.py:   GET  /api/staging/public[/{id}]            (no auth)
    - admin.py:    /api/staging/admin/...                     (admin token)
    - projects.py: /api/staging, /api/staging/user[/{id}], /api/staging/{id}
    - areas.py:    areas, hotspots, info, combined area/hotspot delete
    - items.py:    item library and per-area placements
    - files.py:    GET  /api/files/{path}                     (stored uploads)
    - health.py:   GET  /health

Routes stay thin: parse input, call ProjectService, wrap in ApiResponse.
"""
