#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates the schema on startup against the local SQLite database unless
SWIMDESK_DATABASE_URL points somewhere else.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("SWIMDESK_ENVIRONMENT", "local")
os.environ.setdefault("SWIMDESK_CREATE_TABLES_ON_STARTUP", "true")

import uvicorn

if __name__ == "__main__":
    print("Starting SwimDesk development server")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run("swimdesk.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
