"""EXGRIP combination query API."""

import logging

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .errors import CallerError, StoreError
from .models import CombinationResult, EmptyResult, QueryCriteria
from .pipeline import run_query
from .service import CombinationService, build_service

logger = logging.getLogger(__name__)

app = FastAPI(title="EXGRIP Combinations", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)


@lru_cache
def get_service() -> CombinationService:
    return build_service()


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/process-data", response_model=list[CombinationResult])
async def process_data(
    criteria: QueryCriteria,
    service: CombinationService = Depends(get_service),
):
    try:
        result = await run_query(criteria, service)
    except CallerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError:
        logger.exception("Error processing data")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    if isinstance(result, EmptyResult):
        raise HTTPException(status_code=404, detail=result.message)
    return result
