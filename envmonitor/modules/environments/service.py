from envmonitor.core.exceptions import AppException, NotFoundError, StoreError
from envmonitor.modules.environments.schemas import (
    EnvironmentCreate, EnvironmentUpdate, EnvironmentResponse
)
from envmonitor.modules.environments.store import EnvironmentStore
from typing import List
import logging

logger = logging.getLogger(__name__)


class EnvironmentService:
    def __init__(self, store: EnvironmentStore):
        self.store = store

    def list_environments(self) -> List[EnvironmentResponse]:
        """List all environments, most recently updated first"""
        try:
            return [EnvironmentResponse.model_validate(env) for env in self.store.get_all()]
        except Exception as e:
            logger.exception(f"Error listing environments: {e}")
            raise StoreError() from e

    def get_environment_by_id(self, environment_id: str) -> EnvironmentResponse:
        """Get environment by ID"""
        try:
            environment = self.store.get_by_id(environment_id)
            if environment is None:
                raise NotFoundError("Environment", environment_id)
            return EnvironmentResponse.model_validate(environment)
        except AppException:
            raise
        except Exception as e:
            logger.exception(f"Error getting environment {environment_id}: {e}")
            raise StoreError() from e

    def create_environment(self, environment_data: EnvironmentCreate) -> EnvironmentResponse:
        """Create a new environment; id and lastUpdated are assigned by the store"""
        try:
            environment = self.store.create(environment_data.model_dump())
            logger.info(f"Environment created: {environment.id} ({environment.status})")
            return EnvironmentResponse.model_validate(environment)
        except Exception as e:
            logger.exception(f"Error creating environment: {e}")
            raise StoreError() from e

    def update_environment(self, environment_id: str, environment_data: EnvironmentUpdate) -> EnvironmentResponse:
        """Apply a partial update; fields missing from the body keep their values"""
        try:
            environment = self.store.update(environment_id, environment_data.to_changes())
            if environment is None:
                raise NotFoundError("Environment", environment_id)
            logger.info(f"Environment updated: {environment_id}")
            return EnvironmentResponse.model_validate(environment)
        except AppException:
            raise
        except Exception as e:
            logger.exception(f"Error updating environment {environment_id}: {e}")
            raise StoreError() from e

    def delete_environment(self, environment_id: str) -> None:
        """Delete environment"""
        try:
            deleted = self.store.delete(environment_id)
        except Exception as e:
            logger.exception(f"Error deleting environment {environment_id}: {e}")
            raise StoreError() from e

        if not deleted:
            raise NotFoundError("Environment", environment_id)
        logger.info(f"Environment deleted: {environment_id}")
