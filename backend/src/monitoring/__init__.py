from src.monitoring.metrics import get_metrics, record_nearby_search, record_request

__all__ = ["get_metrics", "record_nearby_search", "record_request"]
