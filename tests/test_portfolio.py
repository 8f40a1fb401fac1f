from __future__ import annotations

import pytest
from sqlalchemy import text

from folio.portfolio import PortfolioReader


@pytest.fixture
def reader(tmp_path) -> PortfolioReader:
    r = PortfolioReader.from_url(f"sqlite:///{tmp_path / 'portfolio.db'}")
    with r.engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE stocks (symbol TEXT PRIMARY KEY, qtty INTEGER NOT NULL, "
                "avg_price REAL NOT NULL, date TEXT NOT NULL, comment TEXT)"
            )
        )
        conn.execute(
            text("INSERT INTO stocks (symbol, qtty, avg_price, date) VALUES (:s, :q, 10, '2025-01-01')"),
            [
                {"s": "JKH", "q": 100},
                {"s": "comb", "q": 5},
                {"s": "HNB", "q": 0},
            ],
        )
    return r


class TestPortfolioReader:
    def test_held_symbols_excludes_zero_quantity(self, reader) -> None:
        assert reader.held_symbols() == ["COMB", "JKH"]

    def test_empty_table(self, reader) -> None:
        with reader.engine.begin() as conn:
            conn.execute(text("DELETE FROM stocks"))
        assert reader.held_symbols() == []
