"""Seed the record store from the product transaction JSON feed."""

import json
import logging
import urllib.request
from pathlib import Path
from typing import Iterable, List

from sales_insights.core.filters import month_of
from sales_insights.core.models import Transaction
from sales_insights.database import TransactionStore

logger = logging.getLogger(__name__)

DEFAULT_SEED_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"


class SeedError(ValueError):
    """Raised when the seed feed cannot be turned into transactions."""


def fetch_seed(url: str = DEFAULT_SEED_URL, timeout: float = 30) -> list:
    logger.info("Fetching seed data from %s", url)
    req = urllib.request.Request(url, method="GET")
    req.add_header("Accept", "application/json")
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        data = json.load(resp)
    if not isinstance(data, list):
        raise SeedError(f"Seed feed must be a JSON list, got {type(data).__name__}")
    return data


def load_seed_file(path) -> list:
    with Path(path).open("r", encoding="utf-8") as fp:
        data = json.load(fp)
    if not isinstance(data, list):
        raise SeedError(f"Seed file must contain a JSON list: {path}")
    return data


def _parse_entry(entry) -> Transaction:
    if not isinstance(entry, dict):
        raise SeedError(f"Seed entry must be an object: {entry!r}")
    for key in ("id", "title", "price", "dateOfSale"):
        if entry.get(key) in (None, ""):
            raise SeedError(f"Missing '{key}' in seed entry: {entry}")
    try:
        price = float(entry["price"])
        tx_id = int(entry["id"])
        month_of(entry["dateOfSale"])
    except (TypeError, ValueError) as exc:
        raise SeedError(f"Invalid seed entry {entry}: {exc}") from exc
    if price < 0:
        raise SeedError(f"Negative price in seed entry: {entry}")
    return Transaction(
        id=tx_id,
        title=str(entry["title"]),
        description=str(entry.get("description") or ""),
        price=price,
        category=str(entry.get("category") or ""),
        date_of_sale=str(entry["dateOfSale"]),
        image=entry.get("image"),
    )


def parse_seed(entries: Iterable[dict]) -> List[Transaction]:
    return [_parse_entry(entry) for entry in entries]


def initialize_store(store: TransactionStore, entries: Iterable[dict]) -> int:
    """Replace the store contents with *entries*, returning the stored count."""
    transactions = parse_seed(entries)
    return store.replace_transactions(transactions)
