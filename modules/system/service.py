"""
System Module - Service Layer
===============================
Read/write helpers for system settings and sequence counters.
"""

from sqlalchemy.orm import Session

from common.helpers import safe_int
from modules.system.models import SystemSetting

LAST_ORDER_ID = "last_order_id"


def get_setting_from_db(db: Session, key: str, default: str = "") -> str:
    """Fetch a system setting using an existing DB session."""
    setting = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    return setting.value if setting else default


def next_sequence_value(db: Session, key: str) -> int:
    """
    Increment an integer counter stored under `key` and return the new value.
    The counter starts at 0, so the first call returns 1. The row is locked
    for the rest of the caller's transaction where the backend supports it.
    """
    setting = (
        db.query(SystemSetting)
        .filter(SystemSetting.key == key)
        .with_for_update()
        .first()
    )
    if not setting:
        setting = SystemSetting(key=key, value="0", description=f"Counter: {key}")
        db.add(setting)

    new_value = (safe_int(setting.value) or 0) + 1
    setting.value = str(new_value)
    db.flush()
    return new_value
