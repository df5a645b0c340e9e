"""
Database Models - SQLAlchemy table backing the ordered key-value store.

One row per key. The key is split across three typed columns so the
database's native composite-key ordering gives (namespace, ts, name)
tuple order: timestamp is the primary sort inside a namespace.
"""
from typing import Tuple

from sqlalchemy import BigInteger, Column, JSON, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class KVEntry(Base):
    """A single key-value pair. The value is an opaque JSON document."""
    __tablename__ = "kv_entries"
    
    namespace = Column(String(64), primary_key=True)
    ts = Column(BigInteger, primary_key=True, autoincrement=False)
    name = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=False)
    
    @property
    def key(self) -> Tuple[str, int, str]:
        return (self.namespace, self.ts, self.name)
