from tutor_chat.storage.persistence import JsonFileStore, MemoryStore, PersistenceAdapter

__all__ = ["JsonFileStore", "MemoryStore", "PersistenceAdapter"]
