"""
RoomStager Backend — Middleware Package
========================================

Request path (outermost first):

    Request → [Request ID] → [Access log] → [Rate limit] → [GZip] → [CORS] → Route

    - Request ID runs first so every later layer, including a 429 from the
      rate limiter, can report the same correlation id.
    - The access log wraps the rate limiter, so rejected requests are logged.
"""
