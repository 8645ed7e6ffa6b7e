from servicenow_alert.store.base import IdStore
from servicenow_alert.store.file import FileIdStore
from servicenow_alert.store.memory import MemoryIdStore

__all__ = ["IdStore", "FileIdStore", "MemoryIdStore"]
