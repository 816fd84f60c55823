import sqlite3

from fastapi import APIRouter, Depends, HTTPException

from ..store import research as store
from .deps import current_user, get_db
from .schemas import ResearchIn, ResearchUpdate

router = APIRouter(prefix='/research', tags=["Research"])

@router.get('', summary="List research notes")
def list_items(user: dict = Depends(current_user), conn: sqlite3.Connection = Depends(get_db)):
    return store.list_items(conn, user["uid"])

@router.post('', status_code=201, summary="Create a research note")
def create_item(req: ResearchIn, user: dict = Depends(current_user), conn: sqlite3.Connection = Depends(get_db)):
    try:
        return store.create_item(conn, user["uid"], req.model_dump())
    except ValueError as e:
        raise HTTPException(400, str(e))

@router.patch('/{item_id}', summary="Update a research note")
def update_item(item_id: str, req: ResearchUpdate, user: dict = Depends(current_user), conn: sqlite3.Connection = Depends(get_db)):
    try:
        item = store.update_item(conn, item_id, user["uid"], req.model_dump())
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not item:
        raise HTTPException(404, 'research item not found')
    return item

@router.delete('/{item_id}', summary="Delete a research note")
def delete_item(item_id: str, user: dict = Depends(current_user), conn: sqlite3.Connection = Depends(get_db)):
    if not store.delete_item(conn, item_id, user["uid"]):
        raise HTTPException(404, 'research item not found')
    return {'ok': True}
