"""Tests for the Mojang profile lookup."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from services.mojang import MojangLookupError, MojangProfile, MojangService


def _response(status_code, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


@pytest.fixture
def service():
    return MojangService(timeout=2)


def test_found_profile(service):
    with patch.object(service.session, "get", return_value=_response(200, {"id": "abc", "name": "Steve"})) as get:
        profile = service.get_profile("steve")

    assert profile == MojangProfile(id="abc", name="Steve")
    get.assert_called_once_with("https://api.mojang.com/users/profiles/minecraft/steve", timeout=2)


@pytest.mark.parametrize("status_code", [204, 404])
def test_unknown_profile(service, status_code):
    with patch.object(service.session, "get", return_value=_response(status_code)):
        assert service.get_profile("Nobody_42") is None


def test_network_error(service):
    with patch.object(service.session, "get", side_effect=requests.ConnectionError("down")):
        with pytest.raises(MojangLookupError):
            service.get_profile("Steve")


def test_server_error(service):
    with patch.object(service.session, "get", return_value=_response(503)):
        with pytest.raises(MojangLookupError):
            service.get_profile("Steve")


def test_malformed_payload(service):
    with patch.object(service.session, "get", return_value=_response(200, {"path": "/x"})):
        with pytest.raises(MojangLookupError):
            service.get_profile("Steve")


@pytest.mark.asyncio
async def test_lookup_runs_off_loop(service):
    with patch.object(service.session, "get", return_value=_response(200, {"id": "abc", "name": "Steve"})):
        assert await service.lookup("Steve") == MojangProfile(id="abc", name="Steve")
