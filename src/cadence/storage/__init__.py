"""
Template and transaction stores.

The engine only talks to the TemplateStore and TransactionStore protocols.
InMemoryTemplateStore/InMemoryTransactionStore back tests and embedding;
SqliteStore is the local workspace database used by the CLI.
"""

from cadence.storage.interfaces import TemplateStore, TransactionStore
from cadence.storage.memory_store import InMemoryTemplateStore, InMemoryTransactionStore
from cadence.storage.sqlite_store import SqliteStore

__all__ = [
    "TemplateStore",
    "TransactionStore",
    "InMemoryTemplateStore",
    "InMemoryTransactionStore",
    "SqliteStore",
]
