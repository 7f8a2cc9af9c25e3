"""Unit tests for the category scrape orchestrator."""

import json
from types import SimpleNamespace

import pytest

from src import scraper as scraper_module
from src.scraper import CategoryScraper
from tests.conftest import SOURCE_URL, raw_product


class FakeRoute:
    def __init__(self, resource_type):
        self.request = SimpleNamespace(resource_type=resource_type)
        self.outcome = None

    def abort(self):
        self.outcome = "abort"

    def continue_(self):
        self.outcome = "continue"


class RecordingPage:
    """Page that records the calls the orchestrator makes on it directly."""

    def __init__(self):
        self.calls = []

    def set_default_timeout(self, timeout):
        self.calls.append(("set_default_timeout", timeout))

    def route(self, pattern, handler):
        self.calls.append(("route", pattern))

    def goto(self, url, wait_until=None):
        self.calls.append(("goto", url, wait_until))

    def wait_for_timeout(self, timeout):
        self.calls.append(("wait_for_timeout", timeout))


@pytest.fixture
def category_scraper(test_config, monkeypatch):
    """Orchestrator whose page-level scraper is stubbed out."""
    scraper = CategoryScraper(test_config, timeout=1234)
    site = scraper.site_scraper
    order = []

    monkeypatch.setattr(site, "wait_for_network_idle", lambda page: order.append("idle"))
    monkeypatch.setattr(site, "dismiss_overlays", lambda page: order.append("overlays"))
    monkeypatch.setattr(site, "wait_for_grid", lambda page, timeout: order.append(("grid", timeout)))

    def load_all(page, json_path=None, source_url="", headful=False):
        order.append("load")
        return 2

    monkeypatch.setattr(site, "load_all_products", load_all)
    monkeypatch.setattr(site, "extract_products", lambda page: [raw_product(1), raw_product(2)])
    scraper.order = order
    return scraper


class TestResourceBlocking:
    """Media and fonts are blocked, everything else passes."""

    @pytest.mark.parametrize("resource_type,outcome", [
        ("media", "abort"),
        ("font", "abort"),
        ("image", "continue"),
        ("xhr", "continue"),
        ("document", "continue"),
    ])
    def test_block_resources(self, test_config, resource_type, outcome):
        route = FakeRoute(resource_type)

        CategoryScraper(test_config)._block_resources(route)

        assert route.outcome == outcome

    def test_prepare_page(self, test_config):
        page = RecordingPage()

        CategoryScraper(test_config, timeout=5000)._prepare_page(page)

        assert page.calls == [("set_default_timeout", 5000), ("route", "**/*")]


class TestScrapeWithPage:
    """Test the pipeline order and the final document."""

    def test_pipeline_order_and_final_write(self, category_scraper, json_path):
        page = RecordingPage()

        count = category_scraper._scrape_with_page(page, SOURCE_URL, json_path)

        assert count == 2
        assert page.calls == [("goto", SOURCE_URL, "domcontentloaded")]
        assert category_scraper.order == ["idle", "overlays", ("grid", 1234), "load"]

        doc = json.loads(json_path.read_text(encoding="utf-8"))
        assert doc["metadata"]["completed"] is True
        assert doc["metadata"]["totalProducts"] == 2


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False
        self.context_options = None

    def new_context(self, **options):
        self.context_options = options
        return SimpleNamespace(new_page=lambda: self.page)

    def close(self):
        self.closed = True


class FakePlaywright:
    """Context manager standing in for ``sync_playwright()``."""

    def __init__(self, browser):
        self.browser = browser
        self.launch_options = None

    def __enter__(self):
        def launch(**options):
            self.launch_options = options
            return self.browser
        return SimpleNamespace(chromium=SimpleNamespace(launch=launch))

    def __exit__(self, *exc):
        return False


class TestScrape:
    """Test browser lifecycle around a scrape."""

    @pytest.fixture
    def browser(self, monkeypatch):
        browser = FakeBrowser(RecordingPage())
        playwright = FakePlaywright(browser)
        monkeypatch.setattr(scraper_module, "sync_playwright", lambda: playwright)
        browser.playwright = playwright
        return browser

    def test_scrape_closes_browser(self, category_scraper, browser, json_path):
        count = category_scraper.scrape(SOURCE_URL, str(json_path))

        assert count == 2
        assert browser.closed
        assert browser.playwright.launch_options == {"headless": True}
        assert browser.context_options["locale"] == "en-PH"
        assert browser.context_options["timezone_id"] == "Asia/Manila"
        assert browser.context_options["viewport"] == {"width": 1366, "height": 900}

    def test_browser_closed_on_error(self, category_scraper, browser, json_path, monkeypatch):
        def fail(page, url, path):
            raise RuntimeError("navigation failed")

        monkeypatch.setattr(category_scraper, "_scrape_with_page", fail)

        with pytest.raises(RuntimeError):
            category_scraper.scrape(SOURCE_URL, str(json_path))
        assert browser.closed

    def test_headful_lingers_before_close(self, category_scraper, browser, json_path, test_config):
        category_scraper.headful = True

        category_scraper.scrape(SOURCE_URL, str(json_path))

        assert browser.playwright.launch_options == {"headless": False}
        assert ("wait_for_timeout", test_config["browser"]["headful_linger_ms"]) in browser.page.calls
