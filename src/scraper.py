"""Main scraper orchestrator."""
import logging
from pathlib import Path

from playwright.sync_api import sync_playwright, Page, Route

from src import storage
from src.scrapers.sm_markets_scraper import SMMarketsScraper


logger = logging.getLogger(__name__)


class CategoryScraper:
    """Drives one browser tab through a full category scrape."""
    
    def __init__(self, config: dict, headful: bool = False, timeout: int = 45000):
        """
        Initialize category scraper.
        
        Args:
            config: Configuration dictionary
            headful: Show the browser window
            timeout: Navigation and default wait timeout in milliseconds
        """
        self.config = config
        self.browser_config = config.get('browser', {})
        self.headful = headful
        self.timeout = timeout
        self.site_scraper = SMMarketsScraper(config)
    
    def _block_resources(self, route: Route):
        """Abort media and font requests; images stay for lazy-load triggers."""
        blocked = self.browser_config.get('blocked_resource_types', [])
        if route.request.resource_type in blocked:
            route.abort()
        else:
            route.continue_()
    
    def _prepare_page(self, page: Page):
        page.set_default_timeout(self.timeout)
        if self.browser_config.get('blocked_resource_types'):
            page.route('**/*', self._block_resources)
    
    def scrape(self, url: str, out: str) -> int:
        """
        Scrape a category page into a JSON document.
        
        Args:
            url: Category page URL
            out: Output JSON path
            
        Returns:
            Number of products in the final document
        """
        json_path = Path(out).resolve()
        
        logger.info("=" * 60)
        logger.info("SM Markets Product Scraper")
        logger.info("=" * 60)
        logger.info(f"Target URL: {url}")
        logger.info(f"Mode: {'Headful (visible)' if self.headful else 'Headless'}")
        logger.info(f"Timeout: {self.timeout}ms")
        
        with sync_playwright() as p:
            logger.info("Launching browser...")
            browser = p.chromium.launch(headless=not self.headful)
            try:
                context = browser.new_context(
                    user_agent=self.browser_config.get('user_agent'),
                    locale=self.browser_config.get('locale'),
                    timezone_id=self.browser_config.get('timezone_id'),
                    viewport=self.browser_config.get('viewport'),
                    device_scale_factor=self.browser_config.get('device_scale_factor', 1),
                )
                page = context.new_page()
                self._prepare_page(page)
                
                count = self._scrape_with_page(page, url, json_path)
                
                if self.headful:
                    linger = self.browser_config.get('headful_linger_ms', 3000)
                    logger.info(f"Keeping browser open for {linger / 1000:g} seconds...")
                    page.wait_for_timeout(linger)
            finally:
                logger.info("Closing browser...")
                browser.close()
        
        logger.info("=" * 60)
        logger.info(f"Scraping complete! Found {count} products")
        logger.info(f"JSON saved to: {json_path}")
        logger.info("Run 'python convert_to_csv.py' to generate CSV from JSON")
        logger.info("=" * 60)
        return count
    
    def _scrape_with_page(self, page: Page, url: str, json_path: Path) -> int:
        """
        Navigate, scroll the list to the end and persist the results.
        
        Args:
            page: Playwright page object
            url: Category page URL
            json_path: Output JSON path
            
        Returns:
            Number of products in the final document
        """
        logger.info(f"Navigating to {url}...")
        page.goto(url, wait_until='domcontentloaded')
        self.site_scraper.wait_for_network_idle(page)
        logger.info("Page loaded")
        
        logger.info("Dismissing any overlays/popups...")
        self.site_scraper.dismiss_overlays(page)
        
        logger.info("Waiting for product grid to appear...")
        self.site_scraper.wait_for_grid(page, self.timeout)
        
        logger.info(f"Output JSON: {json_path}")
        self.site_scraper.load_all_products(
            page,
            json_path=json_path,
            source_url=url,
            headful=self.headful
        )
        
        logger.info("Extracting final product data...")
        products = self.site_scraper.extract_products(page)
        logger.info(f"Extracted {len(products)} product(s)")
        
        return storage.write_final_output(products, json_path, url)
