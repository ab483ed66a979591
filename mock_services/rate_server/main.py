from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Exchange Rate Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/rate_stub") if os.path.exists("/rate_stub") else Path(__file__).resolve().parents[1] / "rate_stub"
# Any non-empty key is accepted, like the free plan of the real provider
REJECTED_KEY = "invalid"

@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/api/latest")
def latest(access_key: str = Query("")):
    if not access_key or access_key == REJECTED_KEY:
        raise HTTPException(status_code=401, detail="invalid access key")
    return JSONResponse(content=json.loads((DATA_DIR / "latest.json").read_text()))

@app.get("/api/broken")
def broken(access_key: str = Query("")):
    # provider error payload: success false and no rates field
    return {"success": False, "error": {"code": 104, "type": "usage_limit_reached"}}
