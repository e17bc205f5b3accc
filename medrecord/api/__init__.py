"""
API orchestration boundary for the medrecord backend.

Design intent:
- Expose thin, typed endpoints over imports, sessions, records and labs.
- Keep request validation explicit and failure modes predictable.
- Orchestrate modules without embedding domain logic in routers.
"""
