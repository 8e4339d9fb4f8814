# src/campus_share/services/__init__.py
"""Business logic services for the CampusShare application."""

from .downloads import authorize_download, issue_signed_url
from .listing import ListingQuery, Page, list_resources
from .storage import LocalFileStorage, get_storage
from .votes import VoteResult, apply_vote, get_user_vote

__all__ = [
    "apply_vote", "get_user_vote", "VoteResult",
    "authorize_download", "issue_signed_url",
    "ListingQuery", "Page", "list_resources",
    "LocalFileStorage", "get_storage",
]
