"""Domain layer (pure logic).

- Keep combination rules and validation here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no Redis, no model calls.
- Every function is deterministic and safe to call from any layer.
"""
