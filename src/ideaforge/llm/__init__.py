"""Request construction and the streaming client."""

from ideaforge.llm.client import IdeaClient, classify_failure
from ideaforge.llm.provider import build_request, chat_url

__all__ = [
    "IdeaClient",
    "build_request",
    "chat_url",
    "classify_failure",
]
