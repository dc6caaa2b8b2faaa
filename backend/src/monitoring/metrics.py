"""In-memory request and nearby-search metrics for /metrics endpoint (production: replace with Prometheus or similar)."""
import time
from collections.abc import MutableMapping
from threading import Lock

_start_time = time.monotonic()
_counts: MutableMapping[str, int] = {}
_last_k = 0
_lock = Lock()


def _status_bucket(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "2xx"
    if 400 <= status_code < 500:
        return "4xx"
    if status_code >= 500:
        return "5xx"
    return "other"


def record_request(status_code: int) -> None:
    bucket = _status_bucket(status_code)
    with _lock:
        _counts[bucket] = _counts.get(bucket, 0) + 1


def record_nearby_search(k: int, total: int) -> None:
    """Count a completed nearby search. k == 0 means no candidates; k >= 2 means k-means ran."""
    global _last_k
    with _lock:
        _counts["nearby"] = _counts.get("nearby", 0) + 1
        if k == 0:
            _counts["nearby_empty"] = _counts.get("nearby_empty", 0) + 1
        elif k >= 2:
            _counts["nearby_clustered"] = _counts.get("nearby_clustered", 0) + 1
        _counts["nearby_items"] = _counts.get("nearby_items", 0) + total
        _last_k = k


def get_metrics() -> dict:
    with _lock:
        counts = dict(_counts)
        last_k = _last_k
    uptime_seconds = time.monotonic() - _start_time
    return {
        "requests_total": sum(counts.get(b, 0) for b in ("2xx", "4xx", "5xx", "other")),
        "requests_2xx": counts.get("2xx", 0),
        "requests_4xx": counts.get("4xx", 0),
        "requests_5xx": counts.get("5xx", 0),
        "nearby_searches": counts.get("nearby", 0),
        "nearby_empty": counts.get("nearby_empty", 0),
        "nearby_clustered": counts.get("nearby_clustered", 0),
        "nearby_cluster_members_total": counts.get("nearby_items", 0),
        "nearby_last_k": last_k,
        "uptime_seconds": round(uptime_seconds, 1),
    }
