"""In-memory FastAPI + Socket.IO backend serving the IShare API contract."""
