"""Tests for the checkout callback: grants, bundle alias, URL scrubbing, replay on refresh."""
from prometheus_client import REGISTRY

from egzamin8.access.callback import interpret_callback, start_page
from egzamin8.access.entitlements import EntitlementStore
from egzamin8.access.location import PageLocation
from egzamin8.access.storage import MemoryStorage
from egzamin8.catalog.loader import Catalog
from egzamin8.catalog.models import BundleOffer, Product, Section, Topic
from egzamin8.navigation.state import CatalogView, ConfirmationView


def _make_catalog():
    products = [
        Product(
            id=pid,
            name=pid.title(),
            price=49.99,
            sections=(Section(id=f"{pid}-1", title="Rozdział 1", topics=(Topic(title="T", content="x"),)),),
        )
        for pid in ("matematyka", "polski", "angielski")
    ]
    bundle = BundleOffer(id="pakiet", price=99.99, original_price=149.97, savings=50)
    return Catalog(products, bundle)


def _store(initial=None):
    storage = MemoryStorage(initial)
    return EntitlementStore(storage, key="egzamin8_purchases"), storage


class TestInterpretCallback:
    def test_no_params_is_ordinary_load(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/")
        assert interpret_callback(location, store, _make_catalog()) is None
        assert location.replaced_url is None
        assert store.granted == frozenset()

    def test_single_product(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/?success=true&subject=matematyka")
        result = interpret_callback(location, store, _make_catalog())
        assert result.granted_id == "matematyka"
        assert result.unlocked == ("matematyka",)
        assert result.newly_granted == ("matematyka",)
        assert not result.is_bundle
        assert store.granted == frozenset({"matematyka"})
        assert location.replaced_url == "/"

    def test_bundle_grants_every_catalog_product(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/?success=true&subject=pakiet")
        result = interpret_callback(location, store, _make_catalog())
        assert result.is_bundle
        assert result.unlocked == ("matematyka", "polski", "angielski")
        assert store.granted == frozenset({"matematyka", "polski", "angielski"})
        assert not store.is_granted("pakiet")

    def test_bundle_with_existing_grant(self):
        store, _ = _store({"egzamin8_purchases": '["polski"]'})
        location = PageLocation("https://egzamin8.pl/?success=true&subject=pakiet")
        result = interpret_callback(location, store, _make_catalog())
        assert result.newly_granted == ("matematyka", "angielski")

    def test_unknown_id_is_granted_as_received(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/?success=true&subject=fizyka")
        result = interpret_callback(location, store, _make_catalog())
        assert result.granted_id == "fizyka"
        assert store.granted == frozenset({"fizyka"})

    def test_unknown_ids_share_one_metric_series(self):
        catalog = _make_catalog()
        before = REGISTRY.get_sample_value("entitlements_granted_total", {"product_id": "unknown"}) or 0.0
        for i in range(20):
            store, _ = _store()
            location = PageLocation(f"https://egzamin8.pl/?success=true&subject=nieznany{i}")
            interpret_callback(location, store, catalog)
            assert store.is_granted(f"nieznany{i}")
        after = REGISTRY.get_sample_value("entitlements_granted_total", {"product_id": "unknown"})
        assert after - before == 20
        labels = {
            sample.labels["product_id"]
            for metric in REGISTRY.collect()
            if metric.name == "entitlements_granted"
            for sample in metric.samples
        }
        assert not any(label.startswith("nieznany") for label in labels)

    def test_repeated_callback_is_noop(self):
        store, storage = _store({"egzamin8_purchases": '["matematyka"]'})
        location = PageLocation("https://egzamin8.pl/?success=true&subject=matematyka")
        result = interpret_callback(location, store, _make_catalog())
        assert result.newly_granted == ()
        assert storage.data["egzamin8_purchases"] == '["matematyka"]'
        assert location.replaced_url == "/"

    def test_success_not_true_is_ignored_but_scrubbed(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/?success=false&subject=matematyka")
        assert interpret_callback(location, store, _make_catalog()) is None
        assert store.granted == frozenset()
        assert location.replaced_url == "/"

    def test_missing_subject_is_ignored(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/?success=true")
        assert interpret_callback(location, store, _make_catalog()) is None
        assert store.granted == frozenset()

    def test_scrub_keeps_path(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/kurs/?success=true&subject=polski&utm=x")
        interpret_callback(location, store, _make_catalog())
        assert location.replaced_url == "/kurs/"


class TestStartPage:
    def test_fresh_client_starts_at_catalog(self):
        store, _ = _store()
        state = start_page(PageLocation("https://egzamin8.pl/"), store, _make_catalog())
        assert state == CatalogView()
        assert store.granted == frozenset()

    def test_callback_moves_to_confirmation(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/?success=true&subject=matematyka")
        state = start_page(location, store, _make_catalog())
        assert state == ConfirmationView(granted_id="matematyka")

    def test_bundle_confirmation_keeps_sentinel(self):
        store, _ = _store()
        location = PageLocation("https://egzamin8.pl/?success=true&subject=pakiet")
        state = start_page(location, store, _make_catalog())
        assert state == ConfirmationView(granted_id="pakiet")

    def test_reload_after_callback_resets_view_keeps_grant(self):
        store, storage = _store()
        start_page(PageLocation("https://egzamin8.pl/?success=true&subject=matematyka"), store, _make_catalog())

        reloaded = EntitlementStore(storage, key="egzamin8_purchases")
        state = start_page(PageLocation("https://egzamin8.pl/"), reloaded, _make_catalog())
        assert state == CatalogView()
        assert reloaded.is_granted("matematyka")
