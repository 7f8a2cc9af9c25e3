"""Unit tests for incremental JSON persistence."""

import json

import pytest

from src import storage
from tests.conftest import SOURCE_URL, raw_product


def read_document(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestLoadExistingProducts:
    """Test reading a previously written document."""

    def test_missing_file(self, json_path):
        assert storage.load_existing_products(json_path) == []

    def test_corrupt_file_starts_fresh(self, json_path):
        json_path.write_text("{not json", encoding="utf-8")

        assert storage.load_existing_products(json_path) == []

    def test_unexpected_layout_starts_fresh(self, json_path):
        json_path.write_text("[1, 2, 3]", encoding="utf-8")

        assert storage.load_existing_products(json_path) == []

    def test_reads_products(self, write_document):
        path = write_document([{"name": "A", "url": "/a"}])

        assert storage.load_existing_products(path) == [{"name": "A", "url": "/a"}]

    def test_products_not_a_list_starts_fresh(self, write_document):
        path = write_document({"a": 1})

        assert storage.load_existing_products(path) == []

    def test_skips_malformed_entries(self, write_document):
        path = write_document([None, "x", {"name": "A", "url": "/a"}])

        assert storage.load_existing_products(path) == [{"name": "A", "url": "/a"}]

    def test_save_over_malformed_products(self, write_document):
        path = write_document("not a list")

        total = storage.save_products_incremental([raw_product(1)], path, SOURCE_URL)

        assert total == 1


class TestSaveProductsIncremental:
    """Test the URL-deduplicated union merge."""

    def test_first_save_creates_document(self, json_path):
        total = storage.save_products_incremental(
            [raw_product(1), raw_product(2)], json_path, SOURCE_URL
        )

        doc = read_document(json_path)
        assert total == 2
        assert doc["metadata"]["totalProducts"] == 2
        assert doc["metadata"]["sourceUrl"] == SOURCE_URL
        assert doc["metadata"]["lastSavedAt"] == doc["metadata"]["scrapedAt"]
        assert "completed" not in doc["metadata"]
        assert doc["products"][0]["name"] == "Product 1"
        assert doc["products"][0]["price"] == 125

    def test_second_save_is_deduplicated_union(self, json_path):
        first = [raw_product(n) for n in range(3)]
        second = [raw_product(n) for n in range(2, 6)]

        storage.save_products_incremental(first, json_path, SOURCE_URL)
        total = storage.save_products_incremental(first + second, json_path, SOURCE_URL)

        doc = read_document(json_path)
        urls = [p["url"] for p in doc["products"]]
        assert urls == [f"/product-{n}.html" for n in range(6)]
        assert total == len(urls) == doc["metadata"]["totalProducts"]

    def test_second_save_with_empty_set(self, json_path):
        storage.save_products_incremental([raw_product(1)], json_path, SOURCE_URL)
        total = storage.save_products_incremental([], json_path, SOURCE_URL)

        assert total == 1
        assert len(read_document(json_path)["products"]) == 1

    def test_identical_save_adds_nothing_and_keeps_fields(self, json_path):
        products = [raw_product(1), raw_product(2)]
        storage.save_products_incremental(products, json_path, SOURCE_URL)
        before = read_document(json_path)["products"]

        # Same URLs, different content: persisted records must not change
        changed = [raw_product(1, price_text="₱999"), raw_product(2, price_text="₱1")]
        storage.save_products_incremental(changed, json_path, SOURCE_URL)

        after = read_document(json_path)["products"]
        assert after == before

    def test_drops_records_without_name_or_url(self, json_path):
        nameless = dict(raw_product(1), name="")
        urlless = dict(raw_product(2), url="")

        total = storage.save_products_incremental(
            [nameless, urlless, raw_product(3)], json_path, SOURCE_URL
        )

        assert total == 1

    def test_duplicate_urls_within_one_extraction(self, json_path):
        total = storage.save_products_incremental(
            [raw_product(1), raw_product(1, price_text="₱2")], json_path, SOURCE_URL
        )

        doc = read_document(json_path)
        assert total == 1
        assert doc["products"][0]["priceText"] == "₱125.00"

    def test_resumes_from_previous_run(self, write_document):
        earlier = {"name": "Old", "url": "/old", "price": 5, "scrapedAt": "2025-01-01T00:00:00.000Z"}
        path = write_document([earlier])

        total = storage.save_products_incremental([raw_product(1)], path, SOURCE_URL)

        doc = read_document(path)
        assert total == 2
        assert doc["products"][0] == earlier

    def test_no_temporary_file_left_behind(self, json_path):
        storage.save_products_incremental([raw_product(1)], json_path, SOURCE_URL)

        assert [p.name for p in json_path.parent.iterdir()] == ["products.json"]

    def test_failed_write_removes_temporary_file(self, json_path):
        with pytest.raises(TypeError):
            storage.write_document(json_path, {}, [{"name": object()}])

        assert list(json_path.parent.iterdir()) == []


class TestWriteFinalOutput:
    """Test the completed final document."""

    def test_marks_completed(self, json_path):
        total = storage.write_final_output([raw_product(1)], json_path, SOURCE_URL)

        doc = read_document(json_path)
        assert total == 1
        assert doc["metadata"]["completed"] is True
        assert "lastSavedAt" not in doc["metadata"]

    def test_keeps_products_saved_earlier(self, json_path):
        storage.save_products_incremental(
            [raw_product(n) for n in range(5)], json_path, SOURCE_URL
        )

        # Virtualized lists may drop early cards from the DOM by the end
        total = storage.write_final_output(
            [raw_product(n) for n in range(3, 8)], json_path, SOURCE_URL
        )

        doc = read_document(json_path)
        assert total == 8
        assert doc["metadata"]["totalProducts"] == 8
        assert len({p["url"] for p in doc["products"]}) == 8
