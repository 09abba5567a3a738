# Webhooks module - inbound webhook dispatch
from .handler import WebhookHandler
from .providers import GenericProvider, GitHubProvider, GitLabProvider, WebhookProvider

__all__ = [
    "WebhookHandler",
    "WebhookProvider",
    "GenericProvider",
    "GitHubProvider",
    "GitLabProvider",
]
