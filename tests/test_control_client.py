"""Tests for the control API HTTP client."""

from unittest.mock import MagicMock, patch

import pytest

from sessionpool.control_client import ControlClient, ControlClientError


def fake_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


class TestControlClient:
    def test_add_many(self):
        results = [{"id": "0", "status": "added", "message": "User 0 is added to http://b"}]
        with patch("sessionpool.control_client.requests.post") as post:
            post.return_value = fake_response(payload={"results": results})

            client = ControlClient("http://pool:8080/")
            assert client.add(many=1, cookie="sid=1", centrifugo_url="http://b") == results

        post.assert_called_once_with(
            "http://pool:8080/connection.add",
            json={"many": 1, "centrifugoUrl": "http://b", "cookie": "sid=1"},
            timeout=30.0,
        )

    def test_remove(self):
        with patch("sessionpool.control_client.requests.post") as post:
            post.return_value = fake_response(payload={"id": "7", "status": "removed"})

            assert ControlClient().remove("7")["status"] == "removed"

        assert post.call_args.kwargs["json"] == {"id": "7"}

    def test_count(self):
        counts = {"total": 3, "connected": 2, "subscribed": 1}
        with patch("sessionpool.control_client.requests.get") as get:
            get.return_value = fake_response(payload=counts)

            assert ControlClient().count() == counts

        get.assert_called_once_with("http://localhost:8080/connection.count", timeout=30.0)

    def test_clean(self):
        with patch("sessionpool.control_client.requests.post") as post:
            post.return_value = fake_response(payload={"status": "cleaned", "removed": 2})

            assert ControlClient().clean()["removed"] == 2

    def test_validation_error(self):
        with patch("sessionpool.control_client.requests.post") as post:
            post.return_value = fake_response(400, payload={"detail": "Cookies not found"})

            with pytest.raises(ControlClientError) as exc_info:
                ControlClient().add(session_id="u1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Cookies not found"

    def test_non_json_error(self):
        response = fake_response(500, text="Internal error")
        response.json.side_effect = ValueError("no json")
        with patch("sessionpool.control_client.requests.post", return_value=response):
            with pytest.raises(ControlClientError, match="Internal error"):
                ControlClient().clean()
