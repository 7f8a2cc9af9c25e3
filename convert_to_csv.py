"""Command-line interface for converting scraped JSON to CSV."""
import argparse
import logging
import sys

import yaml

from src.config import load_config
from src.exporter import DataExporter
from src.logger import setup_logging
from src.utils import default_csv_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='JSON to CSV Converter - Export scraped products to CSV'
    )
    
    parser.add_argument(
        '--json',
        type=str,
        default='products.json',
        help='Path to JSON file to convert (default: products.json)'
    )
    
    parser.add_argument(
        '--csv',
        type=str,
        default=None,
        help='Path to CSV output file (defaults to JSON filename with .csv extension)'
    )
    
    parser.add_argument(
        '--excel',
        action='store_true',
        help='Also write an Excel workbook next to the CSV'
    )
    
    parser.add_argument(
        '-c', '--config',
        type=str,
        default=None,
        help='Path to configuration file (default: config.yaml if present)'
    )
    
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML configuration: {e}", file=sys.stderr)
        return 1
    
    if args.verbose:
        config['logging']['level'] = 'DEBUG'
    
    setup_logging(config.get('logging', {}))
    logger = logging.getLogger(__name__)
    
    csv_path = args.csv or default_csv_path(args.json)
    
    logger.info("=" * 60)
    logger.info("JSON to CSV Converter")
    logger.info("=" * 60)
    logger.info(f"Input JSON: {args.json}")
    logger.info(f"Output CSV: {csv_path}")
    
    exporter = DataExporter(config.get('output', {}))
    
    try:
        exporter.convert(args.json, csv_path, excel=args.excel or None)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Conversion failed: {e}", exc_info=True)
        return 1
    
    logger.info("Conversion complete!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
