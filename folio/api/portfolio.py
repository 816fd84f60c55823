from dataclasses import asdict
import sqlite3

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from ..config import Settings
from ..engine.allocation import compute_allocation, drift_status
from ..engine.buckets import validate_buckets
from ..engine.csv_import import CsvHeaderError
from ..engine.networth import net_worth_by_category
from ..services.importer import ImportRejected, import_csv, preview_csv
from ..services.reporting import generate_report
from ..store import portfolio as store
from ..utils import today_local_iso
from .deps import current_user, get_db, get_settings, owned_strategy
from .schemas import AssetIn, BucketAssignment, HoldingIn, ImportRequest, ReportRequest

router = APIRouter(prefix='/strategies/{strategy_id}', tags=["Portfolio"])

# ---------- assets ----------

@router.get('/assets', summary="List assets")
def list_assets(strategy: dict = Depends(owned_strategy), conn: sqlite3.Connection = Depends(get_db)):
    return store.list_assets(conn, strategy["id"])

@router.post('/assets', status_code=201, summary="Create an asset")
def create_asset(
    req: AssetIn,
    strategy: dict = Depends(owned_strategy),
    user: dict = Depends(current_user),
    conn: sqlite3.Connection = Depends(get_db),
):
    try:
        asset_id = store.upsert_asset(
            conn, strategy["id"], user["uid"], name=req.name, category=req.category, notes=req.notes
        )
    except ValueError as e:
        raise HTTPException(400, str(e))
    return store.get_asset(conn, asset_id)

@router.patch('/assets/{asset_id}', summary="Update an asset's name, category or notes")
def update_asset(
    asset_id: str,
    req: AssetIn,
    strategy: dict = Depends(owned_strategy),
    user: dict = Depends(current_user),
    conn: sqlite3.Connection = Depends(get_db),
):
    try:
        store.upsert_asset(
            conn, strategy["id"], user["uid"],
            name=req.name, category=req.category, notes=req.notes, asset_id=asset_id,
        )
    except LookupError:
        raise HTTPException(404, 'asset not found')
    except ValueError as e:
        raise HTTPException(400, str(e))
    return store.get_asset(conn, asset_id)

@router.put('/assets/{asset_id}/bucket', summary="Assign an asset to a bucket (null clears)")
def assign_bucket(
    asset_id: str,
    req: BucketAssignment,
    strategy: dict = Depends(owned_strategy),
    conn: sqlite3.Connection = Depends(get_db),
):
    try:
        return store.assign_bucket(conn, strategy["id"], asset_id, req.bucket_id)
    except LookupError:
        raise HTTPException(404, 'asset not found')
    except ValueError as e:
        raise HTTPException(400, str(e))

# ---------- holdings ----------

@router.get('/holdings', summary="List holdings, newest as_of first")
def list_holdings(strategy: dict = Depends(owned_strategy), conn: sqlite3.Connection = Depends(get_db)):
    return store.list_holdings(conn, strategy["id"])

@router.post('/holdings', status_code=201, summary="Record a value observation")
def create_holding(
    req: HoldingIn,
    strategy: dict = Depends(owned_strategy),
    user: dict = Depends(current_user),
    conn: sqlite3.Connection = Depends(get_db),
):
    try:
        holding_id = store.create_holding(
            conn, strategy["id"], user["uid"],
            asset_id=req.asset_id, as_of=req.as_of, value=req.value, source=req.source,
        )
    except LookupError:
        raise HTTPException(404, 'asset not found')
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {'id': holding_id, 'asset_id': req.asset_id, 'as_of': req.as_of, 'value': req.value, 'source': req.source}

# ---------- CSV import ----------

def _run_import(conn, strategy, user, text: str, as_of: str | None, source: str | None, settings: Settings):
    default_as_of = as_of or today_local_iso(settings.local_tz)
    try:
        return import_csv(
            conn, strategy["id"], user["uid"], text, default_as_of,
            source=source or settings.default_import_source,
        )
    except (CsvHeaderError, ImportRejected) as e:
        raise HTTPException(400, str(e))

@router.post('/import/preview', summary="Parse a CSV without saving it")
def import_preview(req: ImportRequest, strategy: dict = Depends(owned_strategy), settings: Settings = Depends(get_settings)):
    try:
        preview = preview_csv(req.csv_text, req.as_of or today_local_iso(settings.local_tz))
    except CsvHeaderError as e:
        raise HTTPException(400, str(e))
    return {'row_count': preview['row_count'], 'rows': [asdict(r) for r in preview['rows']]}

@router.post(
    '/import',
    status_code=201,
    summary="Import a CSV export",
    description="Expected headers: name,category,value (optional: asOf). Unknown categories become 'other'.",
)
def import_text(
    req: ImportRequest,
    strategy: dict = Depends(owned_strategy),
    user: dict = Depends(current_user),
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return _run_import(conn, strategy, user, req.csv_text, req.as_of, req.source, settings)

@router.post('/import/upload', status_code=201, summary="Import an uploaded CSV file")
def import_upload(
    file: UploadFile = File(...),
    as_of: str | None = Form(default=None),
    source: str | None = Form(default=None),
    strategy: dict = Depends(owned_strategy),
    user: dict = Depends(current_user),
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    raw = file.file.read()
    text = raw.decode("utf-8-sig", errors="replace")
    return _run_import(conn, strategy, user, text, as_of, source, settings)

@router.get('/import-runs', summary="List import runs")
def import_runs(strategy: dict = Depends(owned_strategy), conn: sqlite3.Connection = Depends(get_db)):
    return store.list_import_runs(conn, strategy["id"])

# ---------- dashboard & reports ----------

@router.get(
    '/dashboard',
    summary="Net worth and allocation drift",
    description="Computed from the latest holding per asset at request time.",
)
def dashboard(
    strategy: dict = Depends(owned_strategy),
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    snapshot = store.load_snapshot(conn, strategy["id"])
    if snapshot is None:
        raise HTTPException(404, 'strategy not found')
    net_worth = net_worth_by_category(snapshot.assets, snapshot.holdings)
    allocation = compute_allocation(snapshot.strategy, snapshot.assets, snapshot.holdings)
    validation = validate_buckets(snapshot.strategy.buckets)
    return {
        'net_worth': {'total': net_worth.total, 'breakdown': net_worth.breakdown},
        'allocation': {
            'total': allocation.total,
            'unassigned_value': allocation.unassigned_value,
            'rows': [
                {**asdict(row), 'status': drift_status(row.drift_percent, settings.drift_notable_pct)}
                for row in allocation.rows
            ],
        },
        'buckets_valid': validation.ok,
        'bucket_errors': validation.errors,
    }

@router.get('/reports', summary="List weekly reports")
def list_reports(strategy: dict = Depends(owned_strategy), conn: sqlite3.Connection = Depends(get_db)):
    return store.list_reports(conn, strategy["id"])

@router.post('/reports', status_code=201, summary="Generate and save a weekly report")
def create_report(
    req: ReportRequest,
    strategy: dict = Depends(owned_strategy),
    user: dict = Depends(current_user),
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return generate_report(
        conn, strategy["id"], user["uid"],
        start_date=req.start_date, end_date=req.end_date, notes=req.notes, settings=settings,
    )
