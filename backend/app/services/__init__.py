from .idea_service import IdeaRecordStore
from .openai_client import CompletionConfig, OpenAICompletionClient, get_completion_client
from .response_sanitizer import sanitize_json

__all__ = [
    "IdeaRecordStore",
    "CompletionConfig",
    "OpenAICompletionClient",
    "get_completion_client",
    "sanitize_json",
]
