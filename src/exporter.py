"""Data export utilities for CSV and Excel."""
import json
import logging
from pathlib import Path
from typing import List

import pandas as pd

from src.utils import sanitize_text, parse_price, default_csv_path


logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'name',
    'url',
    'uom',
    'price',
    'priceText',
    'weightedPriceText',
    'image',
    'scrapedAt',
    'sourceUrl',
]


def _csv_number(value):
    """Write whole-number prices without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class DataExporter:
    """Export a scraped JSON document to CSV and Excel formats."""
    
    def __init__(self, output_config: dict = None):
        """
        Initialize data exporter.
        
        Args:
            output_config: Output configuration dictionary
        """
        self.config = output_config or {}
    
    def load_products(self, json_path) -> dict:
        """
        Read the JSON document.
        
        Raises:
            FileNotFoundError: The JSON file does not exist
            ValueError: The document holds no products
        """
        path = Path(json_path)
        if not path.exists():
            raise FileNotFoundError(f"JSON file not found: {path}")
        
        logger.info(f"Reading JSON file: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        
        if not isinstance(data, dict) or not data.get('products'):
            raise ValueError("No products found in JSON file")
        
        logger.info(f"Found {len(data['products'])} products")
        return data
    
    def to_rows(self, data: dict) -> List[dict]:
        """
        Map every product record to the fixed CSV column set.
        
        Records written by older runs may lack ``price`` or ``sourceUrl``;
        those are derived from ``priceText`` and the document metadata.
        """
        metadata = data.get('metadata') or {}
        rows = []
        for p in data['products']:
            rows.append({
                'name': sanitize_text(p.get('name')),
                'url': p.get('url') or '',
                'uom': sanitize_text(p.get('uom')),
                'price': _csv_number(p['price'] if 'price' in p else parse_price(p.get('priceText'))),
                'priceText': sanitize_text(p.get('priceText')),
                'weightedPriceText': sanitize_text(p.get('weightedPriceText')),
                'image': p.get('image') or '',
                'scrapedAt': p.get('scrapedAt') or '',
                'sourceUrl': p.get('sourceUrl') or metadata.get('sourceUrl') or '',
            })
        return rows
    
    def to_dataframe(self, data: dict) -> pd.DataFrame:
        """Build a DataFrame with columns in the fixed CSV order."""
        return pd.DataFrame(self.to_rows(data), columns=CSV_COLUMNS, dtype=object)
    
    def convert(self, json_path, csv_path=None, excel: bool = None) -> Path:
        """
        Convert the JSON document to CSV (and optionally Excel).
        
        Nothing is written when the document is missing or empty.
        
        Args:
            json_path: Input JSON document
            csv_path: Output CSV path; defaults to ``json_path`` with a .csv extension
            excel: Also write an .xlsx beside the CSV; defaults to ``excel_enabled``
            
        Returns:
            Path to CSV file
        """
        data = self.load_products(json_path)
        csv_path = Path(csv_path) if csv_path else default_csv_path(json_path)
        
        logger.info("Converting to CSV...")
        df = self.to_dataframe(data)
        self._export_csv(df, csv_path)
        logger.info(f"CSV file saved: {csv_path}")
        logger.info(f"Total rows: {len(df)}")
        
        if excel is None:
            excel = self.config.get('excel_enabled', False)
        if excel:
            excel_path = self._export_excel(df, csv_path.with_suffix('.xlsx'))
            logger.info(f"Exported to Excel: {excel_path}")
        
        return csv_path
    
    def _export_csv(self, df: pd.DataFrame, csv_path: Path) -> Path:
        """Write the DataFrame to CSV."""
        if csv_path.parent and not csv_path.parent.exists():
            csv_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(csv_path, index=False, encoding='utf-8')
        return csv_path
    
    def _export_excel(self, df: pd.DataFrame, excel_path: Path) -> Path:
        """
        Export data to Excel with formatting.
        
        Args:
            df: Pandas DataFrame
            excel_path: Destination .xlsx path
            
        Returns:
            Path to Excel file
        """
        with pd.ExcelWriter(excel_path, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name='Products', index=False)
            
            # Auto-adjust column widths
            worksheet = writer.sheets['Products']
            for idx, col in enumerate(df.columns):
                col_values = df[col].fillna('').astype(str)
                max_length = max(col_values.str.len().max() if len(col_values) else 0, len(col))
                col_letter = self._get_column_letter(idx)
                worksheet.column_dimensions[col_letter].width = min(max_length + 2, 50)
        
        return excel_path
    
    def _get_column_letter(self, idx: int) -> str:
        """
        Convert column index to Excel column letter (A, B, ..., Z, AA, AB, ...).
        
        Args:
            idx: Column index (0-based)
            
        Returns:
            Column letter string
        """
        result = ""
        idx += 1  # Excel columns are 1-indexed
        while idx > 0:
            idx -= 1
            result = chr(65 + (idx % 26)) + result
            idx //= 26
        return result
