"""Services for the DevConnector API."""

from devconnector.services.account import AccountService
from devconnector.services.github import GitHubConfig, RepositoryProxy
from devconnector.services.profile import ProfileService

__all__ = ["ProfileService", "AccountService", "GitHubConfig", "RepositoryProxy"]
