import sqlite3

from fastapi import APIRouter, Depends, HTTPException

from ..engine.buckets import validate_buckets
from ..engine.models import AllocationBucket
from ..store import strategies as store
from ..store.strategies import BucketsInvalid
from .deps import current_user, get_db, owned_strategy
from .schemas import BucketsValidateRequest, StrategyCreate, StrategyUpdate

router = APIRouter(prefix='/strategies', tags=["Strategies"])

def _validation_detail(validation, message: str | None = None) -> dict:
    return {
        'message': message or 'Allocation buckets are invalid.',
        'ok': validation.ok,
        'errors': validation.errors,
        'sum': validation.sum,
    }

@router.get('', summary="List strategies")
def list_strategies(user: dict = Depends(current_user), conn: sqlite3.Connection = Depends(get_db)):
    return store.list_strategies(conn, user["uid"])

@router.post('', status_code=201, summary="Create a strategy with default buckets")
def create_strategy(req: StrategyCreate, user: dict = Depends(current_user), conn: sqlite3.Connection = Depends(get_db)):
    try:
        return store.create_strategy(conn, user["uid"], req.name, req.description)
    except ValueError as e:
        raise HTTPException(400, str(e))

@router.post(
    '/validate-buckets',
    summary="Validate allocation buckets",
    description="Dry-run of the bucket checks; nothing is saved.",
)
def validate(req: BucketsValidateRequest, user: dict = Depends(current_user)):
    result = validate_buckets(
        AllocationBucket(id=b.id or "", name=b.name, percent=b.percent) for b in req.buckets
    )
    return {'ok': result.ok, 'errors': result.errors, 'sum': result.sum}

@router.get('/{strategy_id}', summary="Get a strategy")
def get_strategy(strategy: dict = Depends(owned_strategy)):
    return strategy

@router.patch(
    '/{strategy_id}',
    summary="Update a strategy",
    description="Saving buckets is blocked unless they pass validation.",
)
def update_strategy(req: StrategyUpdate, strategy: dict = Depends(owned_strategy), conn: sqlite3.Connection = Depends(get_db)):
    buckets = [b.model_dump() for b in req.buckets] if req.buckets is not None else None
    try:
        return store.update_strategy(
            conn, strategy["id"], name=req.name, description=req.description, buckets=buckets
        )
    except BucketsInvalid as e:
        raise HTTPException(400, _validation_detail(e.validation))
    except ValueError as e:
        raise HTTPException(400, str(e))

@router.delete('/{strategy_id}', summary="Delete a strategy and everything under it")
def delete_strategy(strategy: dict = Depends(owned_strategy), conn: sqlite3.Connection = Depends(get_db)):
    return {'ok': store.delete_strategy(conn, strategy["id"])}
