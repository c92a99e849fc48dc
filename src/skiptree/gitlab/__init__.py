from .api_client import APIClient, APIError
from .models import RemoteJob

__all__ = ["APIClient", "APIError", "RemoteJob"]
