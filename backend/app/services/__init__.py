"""
RoomStager Backend — Services Layer
=====================================

Service Inventory:
    - staging_graph:   pure consistency rules over one project document
    - ProjectService:  load → mutate → save orchestration, listings, lifecycle
    - FileService:     upload validation and storage
    - identifiers:     `<prefix>_<millis>_<base36>` external ids
"""
