import logging
import sqlite3
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from sales_insights.core.filters import TransactionFilter, matches_search, month_of
from sales_insights.core.models import Transaction

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, description, price, category, image, date_of_sale"


def _init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            price REAL NOT NULL CHECK (price >= 0),
            category TEXT NOT NULL DEFAULT '',
            image TEXT,
            date_of_sale TEXT NOT NULL,
            sale_month INTEGER NOT NULL CHECK (sale_month BETWEEN 1 AND 12)
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_transactions_sale_month ON transactions (sale_month)"
    )
    conn.commit()


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=int(row[0]),
        title=row[1],
        description=row[2],
        price=float(row[3]),
        category=row[4],
        image=row[5],
        date_of_sale=row[6],
    )


class TransactionStore:
    """SQLite-backed record store shared by every request in the process.

    The store owns a single connection opened by :meth:`open` and released by
    :meth:`close`. Reads may arrive from several threads at once, so every
    statement runs under a lock.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def open(self) -> "TransactionStore":
        if self._conn is not None:
            return self
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.create_function("matches_search", 4, matches_search, deterministic=True)
        _init_db(conn)
        self._conn = conn
        logger.debug("Opened transaction store at %s", self.db_path)
        return self

    def close(self) -> None:
        if self._conn is None:
            return
        with self._lock:
            self._conn.close()
            self._conn = None
        logger.debug("Closed transaction store at %s", self.db_path)

    def __enter__(self) -> "TransactionStore":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def _query(self, sql: str, params: Iterable[object] = ()) -> list:
        if self._conn is None:
            raise RuntimeError("Transaction store is not open")
        with self._lock:
            return self._conn.execute(sql, list(params)).fetchall()

    def replace_transactions(self, transactions: Iterable[Transaction]) -> int:
        """Replace every stored record with *transactions* in one transaction.

        Parameters
        ----------
        transactions:
            Records to store. Duplicate ids or negative prices abort the
            import and leave the previous contents untouched.
        """
        if self._conn is None:
            raise RuntimeError("Transaction store is not open")
        rows = [
            (
                tx.id,
                tx.title.strip(),
                tx.description.strip(),
                float(tx.price),
                tx.category.strip(),
                tx.image,
                tx.date_of_sale,
                month_of(tx.date_of_sale),
            )
            for tx in transactions
        ]
        with self._lock:
            with self._conn:
                self._conn.execute("DELETE FROM transactions")
                self._conn.executemany(
                    """
                    INSERT INTO transactions
                    (id, title, description, price, category, image, date_of_sale, sale_month)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    rows,
                )
        logger.info("Stored %d transaction(s) in %s", len(rows), self.db_path)
        return len(rows)

    def fetch(
        self,
        tx_filter: TransactionFilter,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        """Return matching records in ascending id order."""
        where, params = tx_filter.where()
        sql = f"SELECT {_COLUMNS} FROM transactions{where} ORDER BY id"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params = params + [limit, offset]
        elif offset:
            sql += " LIMIT -1 OFFSET ?"
            params = params + [offset]
        return [_row_to_transaction(row) for row in self._query(sql, params)]

    def count(self, tx_filter: TransactionFilter) -> int:
        where, params = tx_filter.where()
        row = self._query(f"SELECT COUNT(*) FROM transactions{where}", params)[0]
        return int(row[0] or 0)

    def month_summary(self, month: int) -> Tuple[float, int, int]:
        """Return in-month price total, in-month count and out-of-month count.

        All three come from one statement so they describe the same snapshot.
        """
        row = self._query(
            """
            SELECT COALESCE(SUM(CASE WHEN sale_month = ? THEN price END), 0.0) AS total,
                   COALESCE(SUM(CASE WHEN sale_month = ? THEN 1 ELSE 0 END), 0) AS in_month,
                   COALESCE(SUM(CASE WHEN sale_month != ? THEN 1 ELSE 0 END), 0) AS out_of_month
            FROM transactions
            """,
            [month, month, month],
        )[0]
        return float(row[0] or 0.0), int(row[1] or 0), int(row[2] or 0)

    def prices(self, tx_filter: TransactionFilter) -> List[float]:
        where, params = tx_filter.where()
        rows = self._query(f"SELECT price FROM transactions{where} ORDER BY id", params)
        return [float(row[0]) for row in rows]

    def count_by_category(self, tx_filter: TransactionFilter) -> List[Dict[str, object]]:
        """Count matching records grouped by category."""
        where, params = tx_filter.where()
        rows = self._query(
            f"""
            SELECT category, COUNT(*) AS count
            FROM transactions
            {where}
            GROUP BY category
            ORDER BY category
            """,
            params,
        )
        return [{"category": row[0], "count": int(row[1])} for row in rows]
