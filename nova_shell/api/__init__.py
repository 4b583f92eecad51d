"""Public HTTP API (FastAPI) for the NovaOS record store."""
