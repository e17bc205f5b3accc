"""
medrecord backend package.

Design intent:
- Serve the medical-record API surface (imports, sessions, records, labs).
- Keep domain modules (labs/session/feedback/ai/records) independent from the HTTP layer.
"""
