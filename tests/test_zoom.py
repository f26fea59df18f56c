from unittest.mock import patch

import pytest
import requests

from scheduling.errors import ConfigError, UpstreamError
from tests.conftest import fake_response
from utils import zoom

TOKEN = fake_response(200, {"access_token": "tok"})


def test_missing_credentials_are_listed(app):
    app.config["ZOOM_ACCOUNT_ID"] = ""
    app.config["ZOOM_CLIENT_SECRET"] = None
    with pytest.raises(ConfigError) as exc:
        zoom.get_access_token()
    assert exc.value.missing == ["ZOOM_ACCOUNT_ID", "ZOOM_CLIENT_SECRET"]
    assert "ZOOM_ACCOUNT_ID, ZOOM_CLIENT_SECRET" in exc.value.message


def test_token_request_failure(app):
    with patch("utils.zoom.requests.post", return_value=fake_response(401, text="bad creds")):
        with pytest.raises(UpstreamError):
            zoom.get_access_token()
    with patch("utils.zoom.requests.post", return_value=fake_response(200, {})):
        with pytest.raises(UpstreamError):
            zoom.get_access_token()


def test_create_meeting_embeds_passcode_in_url(app):
    created = fake_response(201, {
        "id": 123456789,
        "join_url": "https://zoom.us/j/123456789",
        "password": "abc123",
        "encrypted_password": "ENC/xyz",
    })
    with patch("utils.zoom.requests.post", side_effect=[TOKEN, created]) as post:
        meeting = zoom.create_meeting("Livable — Mina", "2026-06-10T09:00:00", 60, "Asia/Seoul")

    assert meeting == {
        "join_url": "https://zoom.us/j/123456789?pwd=ENC%2Fxyz",
        "meeting_id": "123456789",
        "passcode": "abc123",
    }
    url = post.call_args_list[1].args[0]
    assert url == "https://api.zoom.us/v2/users/me/meetings"
    payload = post.call_args_list[1].kwargs["json"]
    assert payload["start_time"] == "2026-06-10T09:00:00"
    assert payload["timezone"] == "Asia/Seoul"
    assert payload["type"] == 2


def test_create_meeting_keeps_url_with_pwd(app):
    created = fake_response(201, {"id": 1, "join_url": "https://zoom.us/j/1?pwd=already", "password": "p"})
    with patch("utils.zoom.requests.post", side_effect=[TOKEN, created]):
        meeting = zoom.create_meeting("t", "2026-06-10T09:00:00", 60, "Asia/Seoul")
    assert meeting["join_url"] == "https://zoom.us/j/1?pwd=already"


def test_create_meeting_failures(app):
    with patch("utils.zoom.requests.post", side_effect=[TOKEN, fake_response(400, text="bad")]):
        with pytest.raises(UpstreamError):
            zoom.create_meeting("t", "2026-06-10T09:00:00", 60, "Asia/Seoul")
    with patch("utils.zoom.requests.post", side_effect=[TOKEN, fake_response(201, {"id": 1})]):
        with pytest.raises(UpstreamError) as exc:
            zoom.create_meeting("t", "2026-06-10T09:00:00", 60, "Asia/Seoul")
    assert exc.value.message == "Zoom did not return a join URL."


@pytest.mark.parametrize("status", [204, 404])
def test_delete_is_idempotent(app, status):
    with patch("utils.zoom.requests.post", return_value=TOKEN), \
            patch("utils.zoom.requests.delete", return_value=fake_response(status)) as delete:
        assert zoom.delete_meeting("555") == (True, None)
    assert delete.call_args.args[0] == "https://api.zoom.us/v2/meetings/555"


def test_delete_failures_are_returned_not_raised(app):
    assert zoom.delete_meeting("  ") == (False, "Missing meeting ID")

    with patch("utils.zoom.requests.post", return_value=TOKEN), \
            patch("utils.zoom.requests.delete", return_value=fake_response(500, text="oops")):
        assert zoom.delete_meeting("555") == (False, "Zoom returned 500")

    with patch("utils.zoom.requests.post", return_value=TOKEN), \
            patch("utils.zoom.requests.delete", side_effect=requests.ConnectionError("down")):
        ok, error = zoom.delete_meeting("555")
    assert ok is False and "down" in error

    app.config["ZOOM_CLIENT_ID"] = ""
    ok, error = zoom.delete_meeting("555")
    assert ok is False and "ZOOM_CLIENT_ID" in error
