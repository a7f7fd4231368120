from .conversation_store import ConversationStore, estimate_tokens
from .database import SQLiteMemoryDB

__all__ = [
    "ConversationStore",
    "SQLiteMemoryDB",
    "estimate_tokens",
]
