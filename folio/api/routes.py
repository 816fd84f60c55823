import sqlite3

from fastapi import APIRouter, HTTPException, Request

router = APIRouter()

@router.get(
    '/health',
    summary="Health check",
    description="Returns service and DB connectivity plus the number of strategies.",
    tags=["Health"],
)
def health(request: Request):
    try:
        conn = request.app.state.db.connect()
        try:
            count = conn.execute("SELECT COUNT(*) FROM strategies").fetchone()[0]
        finally:
            conn.close()
        return {'ok': True, 'db': 'ok', 'strategies': count}
    except (sqlite3.Error, OSError) as e:
        raise HTTPException(503, f'db_error: {e}')
