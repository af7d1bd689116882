# Import models so they are registered on Base.metadata
from db_models.asset import Asset
from db_models.asset_request import AssetRequest
from db_models.asset_assignment import AssetAssignment
from db_models.notification import Notification
from db_models.activity_log import ActivityLog

__all__ = ["Asset", "AssetRequest", "AssetAssignment", "Notification", "ActivityLog"]
