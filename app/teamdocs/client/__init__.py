"""
Python client for the teamdocs API: an HTTP client plus models mirroring
server state.
"""
from app.teamdocs.client.api_client import ApiClient, ApiClientError
from app.teamdocs.client.models import Team, User

__all__ = ["ApiClient", "ApiClientError", "Team", "User"]
