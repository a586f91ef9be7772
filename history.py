import logging

import config
from database import DataClientError

logger = logging.getLogger(__name__)


class HistoryRecorder:
    """Append-only writer and reader for the asset timeline."""

    def __init__(self, db):
        self.db = db

    def record(self, asset_id, action, details=""):
        # Best effort: a failed append never undoes the change that caused it
        try:
            return self.db.insert(config.TABLE_HISTORY, {"asset_id": asset_id, "action": action, "details": details})
        except DataClientError as e:
            logger.warning("Could not record %s for asset %s: %s", action, asset_id, e)
            return None

    def timeline(self, asset_id):
        return self.db.select_all(
            config.TABLE_HISTORY,
            order_by="created_at",
            descending=True,
            filters={"asset_id": asset_id},
        )
