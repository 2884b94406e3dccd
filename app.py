"""
Quest Master proxy service.

Run with: uvicorn app:app
"""

import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ai.quest_master import QuestMasterEngine, handle_generate_request, resolve_api_key

load_dotenv()
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Quest Master Proxy")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_engine() -> Optional[QuestMasterEngine]:
    """Engine for this request; None when no API key is configured."""
    if not resolve_api_key():
        return None
    return QuestMasterEngine()


@app.get("/")
def root():
    return {"service": "quest-master", "status": "ok"}


@app.post("/generateAdventure")
def generate_adventure(
    body: Dict[str, Any] = Body(...),
    engine: Optional[QuestMasterEngine] = Depends(get_engine),
):
    status, payload = handle_generate_request(body, engine)
    return JSONResponse(status_code=status, content=payload)
