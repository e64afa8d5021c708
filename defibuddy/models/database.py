"""
DefiBuddy Database Models

SQLAlchemy ORM models for:
- Personality and wallet lookup history
- The buddies contribution ledger
- NFT report metadata served by URL
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, JSON, Index
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Search(Base):
    """Personality lookup history"""
    __tablename__ = 'searches'

    id = Column(Integer, primary_key=True)
    person_name = Column(String(255), nullable=False)
    investments = Column(JSON, nullable=False, default=list)  # [{name, percentage}]
    created_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_searches_created', 'created_at'),
    )

    def __repr__(self):
        return f"<Search(person_name='{self.person_name}')>"


class WalletSearch(Base):
    """Wallet lookup history"""
    __tablename__ = 'wallet_searches'

    id = Column(Integer, primary_key=True)
    address = Column(String(42), nullable=False)
    tokens = Column(JSON, nullable=False, default=list)  # [{name, symbol, balance, balanceUsd, percentage}]
    created_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_wallet_searches_created', 'created_at'),
    )

    def __repr__(self):
        return f"<WalletSearch(address='{self.address}')>"


class Buddy(Base):
    """A named contribution to the shared fund"""
    __tablename__ = 'buddies'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    contribution = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Buddy(name='{self.name}', contribution={self.contribution})>"


class NftMetadata(Base):
    """Report metadata snapshot referenced by a minted token's URI"""
    __tablename__ = 'nft_metadata'

    id = Column(Integer, primary_key=True)
    wallet_address = Column(String(42), nullable=False)
    metadata_json = Column('metadata', JSON, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    def __repr__(self):
        return f"<NftMetadata(id={self.id}, wallet_address='{self.wallet_address}')>"
