# Webhook providers
from .base import WebhookProvider
from .generic import GenericProvider
from .github import GitHubProvider
from .gitlab import GitLabProvider

__all__ = ["WebhookProvider", "GenericProvider", "GitHubProvider", "GitLabProvider"]
