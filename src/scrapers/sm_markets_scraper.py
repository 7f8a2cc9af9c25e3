"""SM Markets category page operations using Playwright."""
import logging
from typing import List

from playwright.sync_api import Page, Error as PlaywrightError

from src import storage


logger = logging.getLogger(__name__)


SCROLL_CONTAINER_JS = '''({container, gallery, card}) => {
    const el = document.querySelector(container);
    if (!el) return;

    // Scroll the container itself and notify its listeners
    el.scrollTop = Math.min(el.scrollTop + el.clientHeight * 0.8, el.scrollHeight);
    el.dispatchEvent(new Event("scroll", {bubbles: true}));

    // Also scroll window as fallback
    window.scrollTo(0, window.scrollY + window.innerHeight * 0.8);
    window.dispatchEvent(new Event("scroll", {bubbles: true}));

    // Bring the last card into view for IntersectionObserver-based loaders
    const root = document.querySelector(gallery);
    if (root) {
        const cards = root.querySelectorAll(card);
        const last = cards[cards.length - 1];
        if (last && typeof last.scrollIntoView === "function") {
            last.scrollIntoView({behavior: "auto", block: "end"});
        }
    }
}'''

SCROLL_WINDOW_JS = '''() => {
    window.scrollTo(0, document.body.scrollHeight);
    window.dispatchEvent(new Event("scroll", {bubbles: true}));
}'''

COUNT_GREW_JS = '''({gallery, card, previous}) => {
    const root = document.querySelector(gallery);
    const count = root ? root.querySelectorAll(card).length : 0;
    return count > previous;
}'''

EXTRACT_CARDS_JS = '''(cards, sel) => {
    const text = (el, s) => { const n = el.querySelector(s); return n ? n.textContent : ""; };
    const attr = (el, s, a) => { const n = el.querySelector(s); return n ? n.getAttribute(a) || "" : ""; };
    return cards.map((card) => ({
        name: text(card, sel.name),
        url: attr(card, sel.url, "href"),
        uom: text(card, sel.uom),
        priceText: text(card, sel.price),
        weightedPriceText: text(card, sel.weighted_price),
        image: attr(card, sel.image, "src"),
    }));
}'''


class SMMarketsScraper:
    """Scrolls an SM Markets infinite product list and extracts its cards."""
    
    def __init__(self, config: dict):
        """
        Initialize SM Markets scraper.
        
        Args:
            config: Configuration dictionary
        """
        self.config = config
        self.site = config['site']
        self.scroll_config = config['scroll']
    
    def dismiss_overlays(self, page: Page):
        """Click away consent banners and quick-view popups if present."""
        timeout = self.scroll_config.get('overlay_click_timeout_ms', 1000)
        for selector in self.site.get('overlay_selectors', []):
            try:
                button = page.query_selector(selector)
                if button:
                    button.click(timeout=timeout)
                    logger.debug(f"Dismissed overlay: {selector}")
            except PlaywrightError as e:
                logger.debug(f"Could not dismiss overlay {selector}: {e}")
    
    def wait_for_grid(self, page: Page, timeout: int):
        """Wait for the product grid to appear; carry on regardless."""
        selector = ', '.join(self.site['grid_selectors'])
        try:
            page.wait_for_selector(selector, timeout=timeout)
            logger.info("Product grid detected")
        except PlaywrightError as e:
            logger.warning(f"Timeout waiting for product grid: {e}")
    
    def wait_for_network_idle(self, page: Page):
        try:
            page.wait_for_load_state('networkidle')
        except PlaywrightError as e:
            logger.debug(f"Network did not go idle: {e}")
    
    def get_product_count(self, page: Page) -> int:
        """Number of product cards currently in the DOM (0 on failure)."""
        try:
            return page.eval_on_selector_all(self.site['item_selector'], 'els => els.length')
        except PlaywrightError as e:
            logger.debug(f"Could not count products: {e}")
            return 0
    
    def auto_scroll(self, page: Page, max_scrolls: int, wait_ms: int):
        """
        Issue scroll pulses to trigger lazy loading.
        
        With the infinite-scroll container present every pulse scrolls it,
        the window and the last card. Otherwise the window is scrolled to the
        bottom until the document height stops changing.
        
        Args:
            page: Playwright page object
            max_scrolls: Number of pulses
            wait_ms: Pause after each pulse
        """
        container = self.site.get('container_selector')
        if container and page.query_selector(container):
            args = {
                'container': container,
                'gallery': self.site['gallery_selector'],
                'card': self.site['card_selector'],
            }
            for _ in range(max_scrolls):
                page.evaluate(SCROLL_CONTAINER_JS, args)
                page.wait_for_timeout(wait_ms)
            return
        
        previous_height = 0
        for _ in range(max_scrolls):
            page.evaluate(SCROLL_WINDOW_JS)
            page.wait_for_timeout(wait_ms)
            current_height = page.evaluate('() => document.body.scrollHeight')
            if current_height == previous_height:
                break
            previous_height = current_height
    
    def wait_for_growth(self, page: Page, previous: int):
        """Wait a bounded time for the card count to exceed ``previous``."""
        try:
            page.wait_for_function(
                COUNT_GREW_JS,
                arg={
                    'gallery': self.site['gallery_selector'],
                    'card': self.site['card_selector'],
                    'previous': previous,
                },
                timeout=self.scroll_config.get('growth_timeout_ms', 5000)
            )
        except PlaywrightError:
            logger.debug(f"No new products appeared beyond {previous}")
    
    def extract_products(self, page: Page) -> List[dict]:
        """
        Extract raw product fields from every card on the page.
        
        Args:
            page: Playwright page object
            
        Returns:
            List of dictionaries with name, url, uom, priceText, weightedPriceText, image
        """
        return page.eval_on_selector_all(
            self.site['item_selector'],
            EXTRACT_CARDS_JS,
            self.site['fields']
        )
    
    def load_all_products(self, page: Page, json_path=None, source_url: str = '', headful: bool = False) -> int:
        """
        Scroll until the product count stops growing, saving as it goes.
        
        The loop ends once the count has not increased for ``max_stable``
        consecutive iterations, or after ``max_iterations``. Products are
        saved every ``save_interval`` iterations and whenever the count grows.
        
        Args:
            page: Playwright page object
            json_path: Output JSON document; no incremental saves when None
            source_url: Category page URL recorded with each product
            headful: Use the slower headful scroll pace
            
        Returns:
            Final product count on the page
        """
        cfg = self.scroll_config
        max_stable = cfg['max_stable']
        save_interval = cfg['save_interval']
        wait_ms = cfg['headful_wait_ms'] if headful else cfg['wait_ms']
        
        previous_count = -1
        stable_iterations = 0
        
        logger.info("Starting to load products by scrolling...")
        logger.info(f"Initial product count: {self.get_product_count(page)}")
        
        if json_path:
            existing = storage.load_existing_products(json_path)
            if existing:
                logger.info(f"Found {len(existing)} existing products in {json_path} - will resume and append")
        
        for i in range(cfg['max_iterations']):
            self.auto_scroll(page, cfg['pulses_per_iteration'], wait_ms)
            
            # Give pending requests a moment before measuring
            page.wait_for_timeout(wait_ms * 0.5)
            
            before = self.get_product_count(page)
            self.wait_for_growth(page, before)
            self.wait_for_network_idle(page)
            
            current_count = self.get_product_count(page)
            
            if json_path and (i % save_interval == 0 or current_count > previous_count):
                storage.save_products_incremental(self.extract_products(page), json_path, source_url)
            
            if current_count > previous_count or i % 5 == 0:
                logger.info(f"Scrolling... Found {current_count} products so far (iteration {i + 1})")
            
            if current_count <= previous_count:
                stable_iterations += 1
                if stable_iterations >= max_stable:
                    logger.info(
                        f"Stopped scrolling: product count stabilized at {current_count} "
                        f"(no change for {stable_iterations} iterations)"
                    )
                    break
            else:
                stable_iterations = 0
            previous_count = current_count
        else:
            logger.warning(f"Reached iteration cap of {cfg['max_iterations']} before the list stabilized")
        
        final_count = self.get_product_count(page)
        logger.info(f"Finished loading. Total products found: {final_count}")
        return final_count
