# api/assets/models.py
"""
Pydantic models for asset endpoints.
"""
from pydantic import BaseModel

from sync.view_models import AssignmentView, EnrichedAsset


class QRCodeResponse(BaseModel):
    asset_id: str
    payload: str


class AssignmentResponse(BaseModel):
    assignment: AssignmentView
    asset: EnrichedAsset
