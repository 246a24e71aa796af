"""Tests for the FAQ content, health and metrics endpoints."""

import logging

from faq_display.main import app

from tests.conftest import BETA, FAQ_TABLE, GAMMA

API = "/api/v1"


def faq_uids(items):
    return [item["data"]["uid"] for item in items]


class TestContentElementFaqs:
    def test_content_element(self, test_client):
        response = test_client.get(f"{API}/content/1/faqs")

        assert response.status_code == 200
        body = response.json()
        assert faq_uids(body["faqs"]) == [100, 101, 102, 103, 106]
        assert [group["category"]["data"]["title"] for group in body["faqsByCategory"]] == [
            "Beta",
            "Alpha",
            "Gamma",
            "Uncategorized",
        ]

    def test_recursive_filtered_content_element(self, test_client):
        body = test_client.get(f"{API}/content/3/faqs").json()

        assert faq_uids(body["faqs"]) == [100, 101, 103, 104]
        assert [group["category"]["data"]["uid"] for group in body["faqsByCategory"]] == [
            BETA,
            GAMMA,
        ]

    def test_hidden_content_element_not_found(self, test_client):
        response = test_client.get(f"{API}/content/2/faqs")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    def test_missing_content_element_not_found(self, test_client):
        response = test_client.get(f"{API}/content/999/faqs")

        assert response.status_code == 404
        assert "999" in response.json()["error"]["message"]

    def test_invalid_uid_rejected(self, test_client):
        assert test_client.get(f"{API}/content/0/faqs").status_code == 422

    def test_processor_unavailable(self, test_client, monkeypatch):
        monkeypatch.delattr(app.state, "faq_processor")
        assert test_client.get(f"{API}/content/1/faqs").status_code == 503


class TestProcessEndpoint:
    def test_process_preserves_processed_data(self, test_client):
        response = test_client.post(
            f"{API}/faq/process",
            json={
                "configuration": {"table": FAQ_TABLE, "pidInList": "1", "asFlat": "entries"},
                "data": {"faq_filter_by_category": str(BETA)},
                "processed_data": {"title": "Help"},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Help"
        assert faq_uids(body["entries"]) == [100, 101, 103]
        # Grouping is off in this page context
        assert body["faqsByCategory"] == []

    def test_empty_request(self, test_client):
        response = test_client.post(f"{API}/faq/process", json={})

        assert response.status_code == 200
        assert response.json() == {"faqs": [], "faqsByCategory": []}

    def test_non_finite_context_values(self, test_client):
        # Python's JSON parser accepts Infinity and NaN literals
        response = test_client.post(
            f"{API}/faq/process",
            content=(
                '{"configuration": {"pidInList": "1", "recursive": NaN},'
                ' "data": {"faq_group_by_category": Infinity}}'
            ),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        body = response.json()
        assert faq_uids(body["faqs"]) == [100, 101, 102, 103, 106]
        assert body["faqsByCategory"] == []

    def test_storage_failure(self, test_client):
        response = test_client.post(
            f"{API}/faq/process",
            json={"configuration": {"table": "tx_missing", "pidInList": "1"}},
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "STORAGE_READ_ERROR"


class TestServiceEndpoints:
    def test_health_reports_database(self, test_client):
        body = test_client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["services"]["database"] == "healthy"

    def test_probes(self, test_client):
        assert test_client.get("/health/ready").json() == {"status": "ready"}
        assert test_client.get("/health/live").json() == {"status": "alive"}

    def test_metrics_exposed(self, test_client):
        test_client.get(f"{API}/content/1/faqs")
        response = test_client.get("/metrics")

        assert response.status_code == 200
        assert "faq_processor_runs_total" in response.text
        assert "faq_processor_stage_latency_seconds" in response.text


class TestErrorLogging:
    HANDLER_LOGGER = "faq_display.core.error_handlers"

    def _handler_records(self, caplog):
        return [r for r in caplog.records if r.name == self.HANDLER_LOGGER]

    def test_not_found_logged_as_warning(self, test_client, caplog):
        with caplog.at_level(logging.DEBUG, logger=self.HANDLER_LOGGER):
            test_client.get(f"{API}/content/999/faqs")

        records = self._handler_records(caplog)
        assert [r.levelno for r in records] == [logging.WARNING]
        assert "RESOURCE_NOT_FOUND" in records[0].getMessage()

    def test_storage_failure_logged_as_error(self, test_client, caplog):
        with caplog.at_level(logging.DEBUG, logger=self.HANDLER_LOGGER):
            test_client.post(
                f"{API}/faq/process",
                json={"configuration": {"table": "tx_missing", "pidInList": "1"}},
            )

        records = self._handler_records(caplog)
        assert [r.levelno for r in records] == [logging.ERROR]
        assert "STORAGE_READ_ERROR" in records[0].getMessage()
