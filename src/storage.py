"""JSON persistence with resumable, URL-deduplicated incremental saves."""
import json
import logging
import os
from pathlib import Path
from typing import Iterable, List

from src.models import Product, build_metadata
from src.utils import utc_timestamp


logger = logging.getLogger(__name__)


def load_existing_products(json_path) -> List[dict]:
    """
    Load previously persisted products.
    
    Args:
        json_path: Path to the output JSON document
        
    Returns:
        List of product dictionaries; empty when the file is missing or unreadable
    """
    path = Path(json_path)
    if not path.exists():
        return []
    
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load existing JSON {path}, starting fresh: {e}")
        return []
    
    if not isinstance(data, dict):
        logger.warning(f"Unexpected JSON layout in {path}, starting fresh")
        return []
    
    products = data.get('products') or []
    if not isinstance(products, list):
        logger.warning(f"'products' in {path} is not a list, starting fresh")
        return []
    
    records = [p for p in products if isinstance(p, dict)]
    if len(records) != len(products):
        logger.warning(f"Ignoring {len(products) - len(records)} malformed product entries in {path}")
    return records


def normalize_products(raw_products: Iterable[dict], source_url: str, scraped_at: str) -> List[Product]:
    """Normalize raw extractions, dropping entries without a name or URL."""
    return [
        Product.from_raw(raw, source_url, scraped_at)
        for raw in raw_products
        if raw.get('name') and raw.get('url')
    ]


def merge_products(existing: List[dict], products: Iterable[Product]) -> List[dict]:
    """
    Append products whose URL is not yet present.
    
    Existing records are returned untouched and keep their order; the first
    occurrence of a URL wins.
    
    Args:
        existing: Persisted product dictionaries
        products: Newly normalized products
        
    Returns:
        The merged list of product dictionaries
    """
    seen_urls = {p.get('url') for p in existing}
    merged = list(existing)
    for product in products:
        if product.url in seen_urls:
            continue
        seen_urls.add(product.url)
        merged.append(product.to_dict())
    return merged


def write_document(json_path, metadata: dict, products: List[dict]):
    """Rewrite the whole output document, replacing the previous file."""
    path = Path(json_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    
    tmp_path = path.with_name(path.name + '.tmp')
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump({'metadata': metadata, 'products': products}, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def save_products_incremental(raw_products: Iterable[dict], json_path, source_url: str) -> int:
    """
    Merge freshly extracted products into the JSON document on disk.
    
    Args:
        raw_products: Raw extractions currently visible on the page
        json_path: Path to the output JSON document
        source_url: Category page URL
        
    Returns:
        Total number of persisted products
    """
    scraped_at = utc_timestamp()
    normalized = normalize_products(raw_products, source_url, scraped_at)
    
    existing = load_existing_products(json_path)
    all_products = merge_products(existing, normalized)
    
    write_document(json_path, build_metadata(source_url, scraped_at, len(all_products)), all_products)
    
    added = len(all_products) - len(existing)
    if added > 0:
        logger.info(f"Saved {added} new products (total: {len(all_products)}) to {json_path}")
    
    return len(all_products)


def write_final_output(raw_products: Iterable[dict], json_path, source_url: str) -> int:
    """
    Write the final document of a run and mark it completed.
    
    The final extraction is merged with what is already on disk, so products
    saved earlier in the run (or by an interrupted previous run) are kept.
    
    Args:
        raw_products: Raw extractions from the fully scrolled page
        json_path: Path to the output JSON document
        source_url: Category page URL
        
    Returns:
        Total number of persisted products
    """
    scraped_at = utc_timestamp()
    normalized = normalize_products(raw_products, source_url, scraped_at)
    all_products = merge_products(load_existing_products(json_path), normalized)
    
    logger.info(f"Writing final {len(all_products)} products to {json_path}...")
    write_document(
        json_path,
        build_metadata(source_url, scraped_at, len(all_products), completed=True),
        all_products
    )
    logger.info(f"Final JSON file saved: {json_path}")
    
    return len(all_products)
