"""
Document store port.

The engine only needs two capabilities from persistence:

- get(kind, doc_id): fetch one document or raise NotFoundError
- get_many / list_documents: read-only batch lookups for the query operations
- run_atomic_transaction(read_keys, fn): read a set of documents, hand them
  to a pure function that returns the writes to apply, and commit every
  write as one unit, raising ConflictError if any read document changed in
  the meantime

SqlDocumentStore implements this with optimistic versioning on top of the
SQLAlchemy async engine: updates are `UPDATE ... WHERE version = <read version>`
and new documents are plain INSERTs guarded by the unique (kind, doc_id) key.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError, OperationalError

from rackt.database.models import Document
from rackt.utils.exceptions import NotFoundError, ConflictError
from rackt.utils.logger import setup_logger

logger = setup_logger(__name__)

GET_MANY_CHUNK_SIZE = 500


@dataclass(frozen=True)
class DocumentKey:
    kind: str
    doc_id: str

    def __str__(self):
        return f"{self.kind}/{self.doc_id}"


@dataclass(frozen=True)
class DocumentWrite:
    key: DocumentKey
    data: dict


Reads = Dict[DocumentKey, Optional[dict]]
TransactionFn = Callable[[Reads], List[DocumentWrite]]


class DocumentStore(ABC):
    """Persistence port consumed by the engine."""

    @abstractmethod
    async def get(self, kind: str, doc_id: str) -> dict:
        """Fetch a document, raising NotFoundError if it does not exist"""

    @abstractmethod
    async def get_many(self, kind: str, doc_ids: Iterable[str]) -> Dict[str, dict]:
        """Fetch several documents of one kind in a single read; missing ids are left out"""

    @abstractmethod
    async def list_documents(self, kind: str) -> List[dict]:
        """Every document of a kind, in no particular order"""

    @abstractmethod
    async def run_atomic_transaction(self, read_keys: Iterable[DocumentKey], fn: TransactionFn) -> None:
        """
        Read `read_keys` (missing documents are passed to `fn` as None), apply
        the writes `fn` returns and commit them atomically.

        `fn` must be free of side effects: it may be called again on retry.

        Raises:
            ConflictError: If a read document was modified, or a new document
                was created, by a concurrent transaction
        """


class SqlDocumentStore(DocumentStore):
    """Optimistically versioned document store on a SQLAlchemy async database."""

    def __init__(self, database):
        self.db = database

    async def get(self, kind: str, doc_id: str) -> dict:
        async with self.db.get_session() as session:
            result = await session.execute(
                select(Document.data).where(Document.kind == kind, Document.doc_id == doc_id)
            )
            data = result.scalar_one_or_none()
            if data is None:
                raise NotFoundError(kind, doc_id)
            return json.loads(data)

    async def get_many(self, kind: str, doc_ids: Iterable[str]) -> Dict[str, dict]:
        doc_ids = list(dict.fromkeys(doc_ids))
        documents = {}
        async with self.db.get_session() as session:
            # Stay under SQLite's bound parameter limit
            for start in range(0, len(doc_ids), GET_MANY_CHUNK_SIZE):
                chunk = doc_ids[start:start + GET_MANY_CHUNK_SIZE]
                result = await session.execute(
                    select(Document.doc_id, Document.data)
                    .where(Document.kind == kind, Document.doc_id.in_(chunk))
                )
                documents.update({row.doc_id: json.loads(row.data) for row in result})
        return documents

    async def list_documents(self, kind: str) -> List[dict]:
        async with self.db.get_session() as session:
            result = await session.execute(select(Document.data).where(Document.kind == kind))
            return [json.loads(data) for data in result.scalars()]

    async def run_atomic_transaction(self, read_keys: Iterable[DocumentKey], fn: TransactionFn) -> None:
        read_keys = list(dict.fromkeys(read_keys))
        try:
            async with self.db.transaction() as session:
                reads: Reads = {}
                versions: Dict[DocumentKey, Optional[int]] = {}
                for key in read_keys:
                    result = await session.execute(
                        select(Document.version, Document.data)
                        .where(Document.kind == key.kind, Document.doc_id == key.doc_id)
                    )
                    row = result.one_or_none()
                    reads[key] = json.loads(row.data) if row else None
                    versions[key] = row.version if row else None

                writes = fn(reads)

                for write in writes:
                    payload = json.dumps(write.data)
                    read_version = versions.get(write.key)
                    if read_version is None:
                        # Not read, or read as missing: must not exist yet
                        session.add(Document(
                            kind=write.key.kind, doc_id=write.key.doc_id,
                            version=1, data=payload,
                        ))
                        await session.flush()
                        continue

                    result = await session.execute(
                        update(Document)
                        .where(
                            Document.kind == write.key.kind,
                            Document.doc_id == write.key.doc_id,
                            Document.version == read_version,
                        )
                        .values(data=payload, version=read_version + 1, updated_at=func.now())
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount != 1:
                        raise ConflictError(f"Document {write.key} changed since version {read_version}")

                logger.debug(f"Committing {len(writes)} write(s) over {len(read_keys)} read(s)")
        except IntegrityError as e:
            raise ConflictError(f"Concurrent insert detected: {e.orig}") from e
        except OperationalError as e:
            # SQLite reports writer contention as a lock error
            if 'locked' in str(e.orig).lower():
                raise ConflictError(f"Database busy: {e.orig}") from e
            raise
