import pytest

from sales_insights.database import TransactionStore
from sales_insights.seed import initialize_store

# Three March sales across two years, two April sales.
SEED_ENTRIES = [
    {
        "id": 1,
        "title": "Blue Shirt",
        "description": "Slim fit cotton shirt",
        "price": 50,
        "category": "men's clothing",
        "image": "https://example.com/1.jpg",
        "sold": True,
        "dateOfSale": "2021-03-05T10:00:00+05:30",
    },
    {
        "id": 2,
        "title": "Gold Ring",
        "description": "Solid gold band",
        "price": 150,
        "category": "jewelery",
        "image": "https://example.com/2.jpg",
        "sold": False,
        "dateOfSale": "2022-03-15",
    },
    {
        "id": 3,
        "title": "Monitor",
        "description": "27 inch display",
        "price": 950,
        "category": "electronics",
        "image": "https://example.com/3.jpg",
        "sold": True,
        "dateOfSale": "2021-03-28T23:59:59Z",
    },
    {
        "id": 4,
        "title": "Backpack",
        "description": "Laptop bag with blue trim",
        "price": 109.95,
        "category": "men's clothing",
        "image": "https://example.com/4.jpg",
        "sold": False,
        "dateOfSale": "2022-04-01",
    },
    {
        "id": 5,
        "title": "Hard Drive",
        "description": "External SSD",
        "price": 329.85,
        "category": "electronics",
        "image": "https://example.com/5.jpg",
        "sold": True,
        "dateOfSale": "2021-04-01T02:00:00+05:30",
    },
]


@pytest.fixture
def seed_entries():
    return [dict(entry) for entry in SEED_ENTRIES]


@pytest.fixture
def db_path(tmp_path, seed_entries):
    path = tmp_path / "sales.db"
    with TransactionStore(str(path)) as store:
        initialize_store(store, seed_entries)
    return path


@pytest.fixture
def store(db_path):
    with TransactionStore(str(db_path)) as store:
        yield store
