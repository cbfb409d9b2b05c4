from sqlalchemy import Column, Integer, String, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class DocumentKind:
    PLAYER = "player"
    MATCH = "match"
    TOURNAMENT = "tournament"

class Document(Base):
    """
    A versioned JSON document.

    Every committed write bumps `version`; writers compare against the version
    they read so concurrent read-modify-write cycles cannot lose updates.
    """
    __tablename__ = 'documents'
    
    id = Column(Integer, primary_key=True)
    kind = Column(String(50), nullable=False, index=True)
    doc_id = Column(String(100), nullable=False)
    version = Column(Integer, nullable=False, default=1)
    data = Column(Text, nullable=False)
    
    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    
    __table_args__ = (UniqueConstraint('kind', 'doc_id', name='uq_document_kind_id'),)
    
    def __repr__(self):
        return f"<Document(kind='{self.kind}', doc_id='{self.doc_id}', version={self.version})>"
