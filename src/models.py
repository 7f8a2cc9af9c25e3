"""Data models for SM Markets product scraping."""
from dataclasses import dataclass
from typing import Optional

from src.utils import sanitize_text, parse_price


@dataclass(frozen=True)
class Product:
    """Represents a scraped product listing, identified by its URL."""
    name: str
    url: str
    uom: str
    price: Optional[float]
    price_text: str
    weighted_price_text: str
    image: str
    scraped_at: str
    source_url: str
    
    @classmethod
    def from_raw(cls, raw: dict, source_url: str, scraped_at: str) -> 'Product':
        """
        Build a normalized product from a raw DOM extraction.
        
        Args:
            raw: Dictionary with name, url, uom, priceText, weightedPriceText, image
            source_url: Category page the product was scraped from
            scraped_at: Timestamp shared by every product of one save
            
        Returns:
            Product object
        """
        return cls(
            name=sanitize_text(raw.get('name')),
            url=raw.get('url') or '',
            uom=sanitize_text(raw.get('uom')),
            price=parse_price(raw.get('priceText')),
            price_text=sanitize_text(raw.get('priceText')),
            weighted_price_text=sanitize_text(raw.get('weightedPriceText')),
            image=raw.get('image') or '',
            scraped_at=scraped_at,
            source_url=source_url,
        )
    
    def to_dict(self):
        """Convert product to dictionary using the JSON document's keys."""
        return {
            'name': self.name,
            'url': self.url,
            'uom': self.uom,
            'price': self.price,
            'priceText': self.price_text,
            'weightedPriceText': self.weighted_price_text,
            'image': self.image,
            'scrapedAt': self.scraped_at,
            'sourceUrl': self.source_url,
        }


def build_metadata(source_url: str, scraped_at: str, total: int, completed: bool = False) -> dict:
    """
    Build the ``metadata`` block of an output document.
    
    Intermediate saves carry ``lastSavedAt``; only the final write of a run
    carries ``completed``.
    """
    metadata = {
        'sourceUrl': source_url,
        'scrapedAt': scraped_at,
        'totalProducts': total,
    }
    if completed:
        metadata['completed'] = True
    else:
        metadata['lastSavedAt'] = scraped_at
    return metadata
