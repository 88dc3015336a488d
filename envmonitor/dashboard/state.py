"""Client-side mirror of the environments list.

The cache only changes after the API confirms a write, so its contents always
match what a fresh ``load()`` would return (apart from ordering of newly
created records, which are appended).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, List, Mapping, Optional, TypeVar

from envmonitor.dashboard.api_client import ApiError, EnvironmentApiClient
from envmonitor.modules.environments.models import EDITABLE_FIELDS
from envmonitor.modules.environments.schemas import EnvironmentResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObservableValue(Generic[T]):
    """Holds a value and notifies subscribers whenever it is replaced."""

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register callback, call it with the current value, and return an unsubscribe function."""
        self._subscribers.append(callback)
        callback(self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


def _payload(record: Mapping[str, Any], keep_empty: bool) -> dict:
    fields = {key: record.get(key) for key in EDITABLE_FIELDS if key in record}
    if keep_empty:
        return fields
    return {key: value for key, value in fields.items() if value is not None}


class EnvironmentStateCache:
    def __init__(self, api: EnvironmentApiClient) -> None:
        self.api = api
        self.environments: ObservableValue[List[EnvironmentResponse]] = ObservableValue([])
        self.loading: ObservableValue[bool] = ObservableValue(False)

    @property
    def snapshot(self) -> List[EnvironmentResponse]:
        return list(self.environments.value)

    def get_by_id(self, environment_id: str) -> Optional[EnvironmentResponse]:
        return next((env for env in self.environments.value if env.id == environment_id), None)

    def load(self) -> bool:
        """Replace the cache with the server's list; on failure keep the stale list."""
        self.loading.set(True)
        try:
            environments = self.api.get_environments()
        except ApiError as e:
            logger.error(f"Error loading environments: {e}")
            return False
        finally:
            self.loading.set(False)
        self.environments.set(environments)
        return True

    def create(self, record: Mapping[str, Any]) -> Optional[EnvironmentResponse]:
        """Create on the server and append the returned record. Any client id is ignored by the server."""
        try:
            created = self.api.create_environment(_payload(record, keep_empty=False))
        except ApiError as e:
            logger.error(f"Error creating environment: {e}")
            return None
        self.environments.set([*self.environments.value, created])
        return created

    def update(self, environment_id: str, record: Mapping[str, Any]) -> Optional[EnvironmentResponse]:
        """Update on the server and replace the cached entry in place.

        Fields present in record with a None value are sent as null and cleared.
        """
        try:
            updated = self.api.update_environment(environment_id, _payload(record, keep_empty=True))
        except ApiError as e:
            logger.error(f"Error updating environment {environment_id}: {e}")
            return None

        current = self.environments.value
        index = next((i for i, env in enumerate(current) if env.id == environment_id), None)
        if index is not None:
            replaced = list(current)
            replaced[index] = updated
            self.environments.set(replaced)
        return updated

    def delete(self, environment_id: str) -> bool:
        try:
            self.api.delete_environment(environment_id)
        except ApiError as e:
            logger.error(f"Error deleting environment {environment_id}: {e}")
            return False
        self.environments.set([env for env in self.environments.value if env.id != environment_id])
        return True
