from __future__ import annotations

import logging

import httpx
import pytest

from envmonitor.dashboard.api_client import ApiError, EnvironmentApiClient
from envmonitor.dashboard.state import EnvironmentStateCache, ObservableValue
from envmonitor.modules.environments.store import EnvironmentStore
from tests.factories import create_environment, environment_payload


def _failing_api(status_code: int = 500) -> EnvironmentApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": "Internal server error"})

    return EnvironmentApiClient(http_client=httpx.Client(transport=httpx.MockTransport(handler), base_url="http://api"))


def _unreachable_api() -> EnvironmentApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return EnvironmentApiClient(http_client=httpx.Client(transport=httpx.MockTransport(handler), base_url="http://api"))


def test_observable_value_replays_and_notifies():
    observable = ObservableValue(1)
    seen = []

    unsubscribe = observable.subscribe(seen.append)
    observable.set(2)
    unsubscribe()
    observable.set(3)

    assert seen == [1, 2]
    assert observable.value == 3


def test_load_replaces_cache_and_toggles_loading(cache: EnvironmentStateCache, store: EnvironmentStore):
    first = create_environment(store, name="first")
    second = create_environment(store, name="second")
    loading_states = []
    cache.loading.subscribe(loading_states.append)

    assert cache.load() is True

    assert [env.id for env in cache.snapshot] == [second.id, first.id]
    assert loading_states == [False, True, False]
    assert cache.loading.value is False


def test_load_failure_keeps_stale_list(cache: EnvironmentStateCache, store: EnvironmentStore, caplog):
    create_environment(store)
    cache.load()
    stale = cache.snapshot

    cache.api = _failing_api()
    with caplog.at_level(logging.ERROR):
        assert cache.load() is False

    assert cache.snapshot == stale
    assert cache.loading.value is False
    assert "Error loading environments" in caplog.text


def test_load_failure_when_unreachable(caplog):
    cache = EnvironmentStateCache(_unreachable_api())

    with caplog.at_level(logging.ERROR):
        assert cache.load() is False

    assert cache.snapshot == []
    assert cache.loading.value is False
    assert "connection refused" in caplog.text


def test_create_appends_server_record(cache: EnvironmentStateCache, store: EnvironmentStore):
    existing = create_environment(store)
    cache.load()
    notifications = []
    cache.environments.subscribe(notifications.append)

    record = dict(environment_payload(name="New one"), id="env-1-local", version=None)
    created = cache.create(record)

    assert created is not None
    assert created.id != "env-1-local"
    assert created.version is None
    assert [env.id for env in cache.snapshot] == [existing.id, created.id]
    assert len(notifications) == 2


def test_create_matches_fresh_reload(cache: EnvironmentStateCache, store: EnvironmentStore):
    create_environment(store)
    cache.load()
    cache.create(environment_payload(name="Another"))
    mirrored = {env.id: env for env in cache.snapshot}

    cache.load()

    assert {env.id: env for env in cache.snapshot} == mirrored


def test_create_failure_leaves_cache(cache: EnvironmentStateCache, caplog):
    cache.load()

    with caplog.at_level(logging.ERROR):
        created = cache.create({"url": "", "status": "working"})

    assert created is None
    assert cache.snapshot == []
    assert "Error creating environment" in caplog.text


def test_update_replaces_in_place(cache: EnvironmentStateCache, store: EnvironmentStore):
    first = create_environment(store, name="first")
    second = create_environment(store, name="second")
    cache.load()
    before = cache.snapshot

    updated = cache.update(first.id, {"status": "down", "name": "first"})

    assert updated.status == "down"
    after = cache.snapshot
    assert [env.id for env in after] == [env.id for env in before]
    assert after[1] == updated
    assert after[0] == before[0]
    assert store.get_by_id(second.id).status == "working"


def test_update_sends_cleared_fields(cache: EnvironmentStateCache, store: EnvironmentStore):
    record = create_environment(store)
    cache.load()

    updated = cache.update(record.id, {"name": None, "notes": None, "url": record.url, "status": "working"})

    assert updated.name is None
    assert updated.notes is None
    assert store.get_by_id(record.id).name is None


def test_update_of_uncached_id_is_a_local_noop(cache: EnvironmentStateCache, store: EnvironmentStore):
    cache.load()
    record = create_environment(store)

    updated = cache.update(record.id, {"status": "degraded"})

    assert updated is not None
    assert cache.snapshot == []


def test_update_failure_leaves_cache(cache: EnvironmentStateCache, store: EnvironmentStore, caplog):
    record = create_environment(store)
    cache.load()
    before = cache.snapshot

    with caplog.at_level(logging.ERROR):
        assert cache.update(record.id, {"status": "paused"}) is None
        assert cache.update("env-0-missing", {"status": "down"}) is None

    assert cache.snapshot == before
    assert "Invalid status value" in caplog.text
    assert "Environment not found" in caplog.text


def test_delete_removes_entry(cache: EnvironmentStateCache, store: EnvironmentStore):
    first = create_environment(store)
    second = create_environment(store)
    cache.load()

    assert cache.delete(first.id) is True

    assert [env.id for env in cache.snapshot] == [second.id]
    assert store.get_by_id(first.id) is None


def test_delete_failure_leaves_cache(cache: EnvironmentStateCache, store: EnvironmentStore, caplog):
    create_environment(store)
    cache.load()
    before = cache.snapshot

    with caplog.at_level(logging.ERROR):
        assert cache.delete("env-0-missing") is False

    assert cache.snapshot == before
    assert "Error deleting environment" in caplog.text


def test_get_by_id(cache: EnvironmentStateCache, store: EnvironmentStore):
    record = create_environment(store)
    cache.load()

    assert cache.get_by_id(record.id).url == record.url
    assert cache.get_by_id("env-0-missing") is None


def test_api_client_raises_api_error_with_status():
    api = _failing_api(status_code=503)

    with pytest.raises(ApiError) as exc_info:
        api.get_environments()

    assert exc_info.value.status_code == 503
    assert "Internal server error" in str(exc_info.value)


def test_api_client_get_environment(client, store: EnvironmentStore):
    record = create_environment(store)
    api = EnvironmentApiClient(http_client=client)

    fetched = api.get_environment(record.id)

    assert fetched.id == record.id
    assert fetched.last_updated == record.last_updated
    with pytest.raises(ApiError) as exc_info:
        api.get_environment("env-0-missing")
    assert exc_info.value.status_code == 404


def _replying_api(status_code: int, content: bytes) -> EnvironmentApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=content, headers={"Content-Type": "application/json"})

    return EnvironmentApiClient(http_client=httpx.Client(transport=httpx.MockTransport(handler), base_url="http://api"))


def test_load_with_non_json_body_keeps_stale_list(cache: EnvironmentStateCache, store: EnvironmentStore, caplog):
    create_environment(store)
    cache.load()
    stale = cache.snapshot

    cache.api = _replying_api(200, b"<html>proxy</html>")
    with caplog.at_level(logging.ERROR):
        assert cache.load() is False

    assert cache.snapshot == stale
    assert cache.loading.value is False
    assert "unreadable body" in caplog.text


def test_load_with_object_instead_of_list_fails_cleanly(caplog):
    cache = EnvironmentStateCache(_replying_api(200, b'{"environments": []}'))

    with caplog.at_level(logging.ERROR):
        assert cache.load() is False

    assert cache.snapshot == []


def test_create_with_unexpected_body_leaves_cache(caplog):
    cache = EnvironmentStateCache(_replying_api(201, b'{"ok": true}'))

    with caplog.at_level(logging.ERROR):
        assert cache.create({"url": "10.0.0.1", "status": "working"}) is None

    assert cache.snapshot == []
    assert "Error creating environment" in caplog.text


def test_update_with_unexpected_body_leaves_cache(cache: EnvironmentStateCache, store: EnvironmentStore):
    record = create_environment(store)
    cache.load()
    before = cache.snapshot

    cache.api = _replying_api(200, b"not json")

    assert cache.update(record.id, {"status": "down"}) is None
    assert cache.snapshot == before


def test_api_client_unreadable_body_keeps_status_code():
    api = _replying_api(201, b'{"ok": true}')

    with pytest.raises(ApiError) as exc_info:
        api.create_environment({"url": "10.0.0.1", "status": "working"})

    assert exc_info.value.status_code == 201
