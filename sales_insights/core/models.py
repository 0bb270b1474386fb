from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class Transaction:
    id: int
    title: str
    description: str
    price: float
    category: str
    date_of_sale: str
    image: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        """Return the JSON wire form, keyed the way the seed feed is."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "image": self.image,
            "dateOfSale": self.date_of_sale,
        }
