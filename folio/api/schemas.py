from pydantic import BaseModel, Field
from typing import Optional

class SignUpRequest(BaseModel):
    email: str
    password: str
    display_name: str = ""

class SignInRequest(BaseModel):
    email: str
    password: str

class BucketIn(BaseModel):
    id: Optional[str] = None
    name: str = ""
    percent: Optional[float] = None

class StrategyCreate(BaseModel):
    name: str
    description: str = ""

class StrategyUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    buckets: Optional[list[BucketIn]] = None

class BucketsValidateRequest(BaseModel):
    buckets: list[BucketIn]

class AssetIn(BaseModel):
    name: str
    category: str = "other"
    notes: str = ""

class BucketAssignment(BaseModel):
    bucket_id: Optional[str] = None

class HoldingIn(BaseModel):
    asset_id: str
    as_of: str
    value: float
    source: str = "manual"

class ImportRequest(BaseModel):
    csv_text: str
    as_of: Optional[str] = None
    source: Optional[str] = None

class ReportRequest(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    notes: str = ""

class ResearchIn(BaseModel):
    title: str
    url: str = ""
    notes: str = ""
    tags: list[str] = Field(default_factory=list)
    strategy_ids: list[str] = Field(default_factory=list)
    asset_ids: list[str] = Field(default_factory=list)

class ResearchUpdate(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    strategy_ids: Optional[list[str]] = None
    asset_ids: Optional[list[str]] = None

