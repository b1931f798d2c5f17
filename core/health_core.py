"""
Health Core - System Health Business Logic.

Aggregates liveness, the active classification model, database status and
storage metrics.
"""

import datetime
import logging
import shutil
from typing import Any

import psutil

from config import get_config
from utils.db import closing_connection, fetch_entry_counts

logger = logging.getLogger(__name__)


def get_health(model_id: str) -> dict[str, Any]:
    """
    Collects a health snapshot.

    Args:
        model_id: Identifier of the active classification model

    Returns:
        Dictionary with status, model, database, disk and system vitals.
    """
    db_status = _check_database()
    disk_status = _check_disk_space()

    # Determine overall status
    overall = "ok"
    if not db_status["connected"]:
        overall = "error"
    elif disk_status["percent"] > 90:
        overall = "warning"

    return {
        "status": overall,
        "model": model_id,
        "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
        "database": db_status,
        "disk": disk_status,
        "system": _collect_vitals(),
    }


def _collect_vitals() -> dict[str, Any]:
    """Collects OS-level vitals."""
    try:
        return {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "ram_percent": psutil.virtual_memory().percent,
        }
    except Exception as e:
        logger.error(f"Failed to collect system vitals: {e}")
        return {"error": str(e)}


def _check_database() -> dict[str, Any]:
    """Checks database connectivity and entry counts."""
    status = {"connected": False, "latency_ms": None, "entries": None, "deleted": None}
    try:
        start = datetime.datetime.now()
        with closing_connection() as conn:
            conn.execute("SELECT 1")
            status.update(fetch_entry_counts(conn))

        latency = (datetime.datetime.now() - start).total_seconds() * 1000
        status["connected"] = True
        status["latency_ms"] = round(latency, 2)

    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        status["error"] = "unavailable"

    return status


def _check_disk_space() -> dict[str, Any]:
    """Checks disk space usage for the storage directory."""
    config = get_config()
    output_dir = config.get("OUTPUT_DIR", ".")

    try:
        total, used, free = shutil.disk_usage(output_dir)
        percent = (used / total) * 100 if total > 0 else 0

        return {
            "total_gb": round(total / (1024**3), 2),
            "free_gb": round(free / (1024**3), 2),
            "percent": round(percent, 1),
        }
    except Exception as e:
        logger.error(f"Disk check failed: {e}")
        return {"error": "unavailable", "percent": 0}
