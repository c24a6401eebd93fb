"""ORM models exposed for metadata discovery."""
from dayplanner.db.models.saved_schedule import SavedSchedule, SavedTask

__all__ = [
    "SavedSchedule",
    "SavedTask",
]
