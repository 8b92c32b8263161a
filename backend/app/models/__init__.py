from .idea import IdeaRecord

__all__ = ["IdeaRecord"]
