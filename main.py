"""Command-line interface for the SM Markets category scraper."""
import argparse
import logging
import sys

import yaml

from src.config import load_config
from src.logger import setup_logging
from src.scraper import CategoryScraper


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='SM Markets Product Scraper - Scroll a category page and save its products to JSON'
    )
    
    parser.add_argument(
        '--url',
        type=str,
        required=True,
        help='SM Markets category URL to scrape'
    )
    
    parser.add_argument(
        '--out',
        type=str,
        default='products.json',
        help='Path to write JSON output (default: products.json)'
    )
    
    parser.add_argument(
        '--headful',
        action='store_true',
        help='Run browser headful (visible)'
    )
    
    parser.add_argument(
        '--timeout',
        type=int,
        default=45000,
        help='Navigation timeout in ms (default: 45000)'
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
    
    # Load configuration
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
    
    scraper = CategoryScraper(config, headful=args.headful, timeout=args.timeout)
    
    try:
        scraper.scrape(args.url, args.out)
        return 0
    except KeyboardInterrupt:
        logger.info(f"Scraping interrupted by user; progress so far is kept in {args.out}")
        return 1
    except Exception as e:
        logger.error(f"Scraping failed: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
