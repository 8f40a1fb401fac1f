# folio/portfolio.py
# Purpose: Read-only view of which symbols the portfolio currently holds.
# Notes: The stocks table is owned by the portfolio CRUD side; we never write to it.

from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

HELD_SYMBOLS_SQL = text("SELECT symbol FROM stocks WHERE qtty > 0")


class PortfolioReader:
    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> PortfolioReader:
        return cls(create_engine(database_url, pool_pre_ping=True))

    def held_symbols(self) -> list[str]:
        """Sorted, de-duplicated upper-case symbols with a non-zero quantity."""
        with self.engine.connect() as conn:
            rows = conn.execute(HELD_SYMBOLS_SQL).scalars().all()
        return sorted({str(s).strip().upper() for s in rows if s})
