"""Pytest fixtures and configuration for scraper tests."""

import json
from pathlib import Path

import pytest

from src.config import DEFAULT_CONFIG, merge_config


SOURCE_URL = "https://www.smmarkets.ph/fresh-produce.html"


def raw_product(n: int, price_text: str = "₱125.00") -> dict:
    """Raw card extraction as returned by the page script."""
    return {
        "name": f"  Product   {n}\n ",
        "url": f"/product-{n}.html",
        "uom": " 1 pc ",
        "priceText": price_text,
        "weightedPriceText": "",
        "image": f"https://cdn.example.com/{n}.jpg",
    }


@pytest.fixture
def test_config() -> dict:
    """Default configuration with fast scroll settings and no log file."""
    return merge_config(DEFAULT_CONFIG, {
        "scroll": {"max_iterations": 50, "wait_ms": 0, "headful_wait_ms": 0},
        "logging": {"file": "", "console": False},
    })


@pytest.fixture
def json_path(tmp_path) -> Path:
    return tmp_path / "products.json"


@pytest.fixture
def write_document(tmp_path):
    """Write a JSON document with the given products and return its path."""
    def _write(products, metadata=None, name="products.json"):
        path = tmp_path / name
        payload = {
            "metadata": metadata or {"sourceUrl": SOURCE_URL, "totalProducts": len(products)},
            "products": products,
        }
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return _write


class FakePage:
    """
    Stand-in for a Playwright page whose card count follows a script.
    
    Each call to ``wait_for_load_state`` advances to the next scripted count;
    once the script is exhausted the last count repeats.
    """

    def __init__(self, counts, has_container=True):
        self.counts = list(counts)
        self.step = 0
        self.has_container = has_container
        self.evaluate_calls = 0
        self.timeouts = []

    @property
    def count(self):
        return self.counts[min(self.step, len(self.counts) - 1)]

    def query_selector(self, selector):
        return object() if self.has_container else None

    def evaluate(self, expression, arg=None):
        self.evaluate_calls += 1
        return 1000

    def wait_for_timeout(self, timeout):
        self.timeouts.append(timeout)

    def wait_for_function(self, expression, arg=None, timeout=None):
        return True

    def wait_for_load_state(self, state=None, timeout=None):
        self.step += 1

    def eval_on_selector_all(self, selector, expression, arg=None):
        if expression == "els => els.length":
            return self.count
        return [raw_product(n) for n in range(self.count)]


@pytest.fixture
def fake_page_factory():
    return FakePage
