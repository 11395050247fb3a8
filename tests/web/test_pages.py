"""
End-to-end scenarios through the FastAPI app: callback on page load, reload,
catalog gating, content navigation, checkout redirect.
Cookies of the TestClient play the role of the browser storage.
"""
from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi.testclient import TestClient

from egzamin8.main import app


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _entitlements(client):
    return set(client.get("/api/entitlements").json()["granted"])


def _event(client, **data):
    return client.post("/events", data=data)


class TestPageLoad:
    def test_scenario_a_fresh_client(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Przygotuj się do egzaminu" in resp.text
        assert "replaceState" not in resp.text
        assert _entitlements(client) == set()

    def test_scenario_b_single_product_callback(self, client):
        resp = client.get("/?success=true&subject=matematyka")
        assert resp.status_code == 200
        assert "Dziękujemy za zakup!" in resp.text
        assert "z przedmiotu Matematyka" in resp.text
        assert 'history.replaceState({}, "", "/")' in resp.text
        assert _entitlements(client) == {"matematyka"}

    def test_scenario_c_bundle_callback(self, client):
        resp = client.get("/?success=true&subject=pakiet")
        assert "wszystkich przedmiotów" in resp.text
        assert _entitlements(client) == {"matematyka", "polski", "angielski"}
        # Promo banner is hidden once everything is owned
        assert "MEGA PROMOCJA" not in client.get("/").text

    def test_scenario_f_reload_after_callback(self, client):
        client.get("/?success=true&subject=matematyka")
        resp = client.get("/")
        assert "Przygotuj się do egzaminu" in resp.text
        assert "Dziękujemy za zakup!" not in resp.text
        assert _entitlements(client) == {"matematyka"}

    def test_promo_banner_subscribes_to_stream(self, client):
        html = client.get("/").text
        assert 'new EventSource("/promo/stream")' in html
        assert 'addEventListener("countdown"' in html
        assert 'addEventListener("notification"' in html
        assert 'id="notification" hidden' in html

    def test_no_stream_once_everything_is_owned(self, client):
        client.get("/?success=true&subject=pakiet")
        assert "EventSource" not in client.get("/").text

    def test_unknown_subject_generic_message(self, client):
        resp = client.get("/?success=true&subject=fizyka")
        assert "dostęp do zakupionych materiałów" in resp.text
        assert "fizyka" in _entitlements(client)

    def test_tampered_entitlement_cookie_means_nothing_purchased(self, client):
        client.cookies.set("egzamin8_purchases", "matematyka.unsigned")
        assert _entitlements(client) == set()


class TestNavigation:
    def test_scenario_d_purchased_product_opens_content(self, client):
        client.get("/?success=true&subject=matematyka")
        client.get("/")
        resp = _event(client, type="select", product_id="matematyka")
        assert resp.url.path == "/view"
        assert "Liczby i działania" in resp.text
        assert "Kolejność wykonywania działań" in resp.text
        assert "Kup dostęp" not in resp.text

    def test_scenario_e_not_purchased_opens_preview(self, client):
        client.get("/")
        resp = _event(client, type="select", product_id="polski")
        assert "Kup dostęp za 49.99 zł" in resp.text
        assert "Lektury obowiązkowe" in resp.text
        resp = _event(client, type="back")
        assert "Przygotuj się do egzaminu" in resp.text

    def test_topic_expand_collapse_and_section_switch(self, client):
        client.get("/?success=true&subject=matematyka")
        _event(client, type="go_to_content", product_id="matematyka")
        resp = _event(client, type="select_topic", section_id="liczby", position="0")
        assert "<h4>Zasada ogólna</h4>" in resp.text
        assert "<strong>nawiasach</strong>" in resp.text
        resp = _event(client, type="select_topic", section_id="liczby", position="0")
        assert "Zasada ogólna" not in resp.text
        resp = _event(client, type="select_section", section_id="geometria")
        assert "Twierdzenie Pitagorasa" in resp.text

    def test_go_to_content_not_allowed_for_unpurchased(self, client):
        client.get("/?success=true&subject=matematyka")
        resp = _event(client, type="go_to_content", product_id="polski")
        assert "Dziękujemy za zakup!" in resp.text

    def test_go_home(self, client):
        client.get("/?success=true&subject=matematyka")
        resp = _event(client, type="go_home")
        assert "Przygotuj się do egzaminu" in resp.text

    def test_payment_confirmed_cannot_be_posted(self, client):
        client.get("/")
        resp = _event(client, type="payment_confirmed", granted_id="pakiet")
        assert resp.status_code == 400
        assert _entitlements(client) == set()

    def test_unknown_event(self, client):
        assert _event(client, type="teleport").status_code == 400

    def test_view_without_cookie_is_catalog(self, client):
        assert "Przygotuj się do egzaminu" in client.get("/view").text


class TestCheckout:
    def test_product_checkout_redirect(self, client):
        resp = client.get("/checkout/matematyka", follow_redirects=False)
        assert resp.status_code == 303
        location = resp.headers["location"]
        assert location.startswith("https://buy.stripe.com/6oUcN47accNO6KN1lbdnW02?locale=pl&success_url=")
        success_url = parse_qs(urlsplit(location).query)["success_url"][0]
        assert success_url == "http://testserver/?success=true&subject=matematyka"

    def test_bundle_checkout_redirect(self, client):
        resp = client.get("/checkout/pakiet", follow_redirects=False)
        success_url = parse_qs(urlsplit(resp.headers["location"]).query)["success_url"][0]
        assert success_url.endswith("subject=pakiet")

    def test_purchase_event_redirects(self, client):
        client.get("/")
        _event(client, type="select", product_id="polski")
        resp = client.post("/events", data={"type": "purchase", "product_id": "polski"}, follow_redirects=False)
        assert resp.status_code == 303
        assert "subject%3Dpolski" in resp.headers["location"]
        # Nothing is granted before the provider calls back
        assert _entitlements(client) == set()

    def test_unknown_product(self, client):
        assert client.get("/checkout/fizyka", follow_redirects=False).status_code == 404
