from fastapi import APIRouter, Depends, Response
from envmonitor.core.dependencies import get_environment_store
from envmonitor.modules.environments.schemas import (
    EnvironmentCreate, EnvironmentUpdate, EnvironmentResponse
)
from envmonitor.modules.environments.service import EnvironmentService
from envmonitor.modules.environments.store import EnvironmentStore
from typing import List

router = APIRouter(prefix="/environments", tags=["environments"])


def get_environment_service(store: EnvironmentStore = Depends(get_environment_store)) -> EnvironmentService:
    return EnvironmentService(store)


@router.get("", response_model=List[EnvironmentResponse], response_model_exclude_none=True)
def list_environments(service: EnvironmentService = Depends(get_environment_service)):
    """List all environments, most recently updated first"""
    return service.list_environments()


@router.get("/{environment_id}", response_model=EnvironmentResponse, response_model_exclude_none=True)
def get_environment(
    environment_id: str,
    service: EnvironmentService = Depends(get_environment_service)
):
    """Get environment by ID"""
    return service.get_environment_by_id(environment_id)


@router.post("", response_model=EnvironmentResponse, response_model_exclude_none=True, status_code=201)
def create_environment(
    environment_data: EnvironmentCreate,
    service: EnvironmentService = Depends(get_environment_service)
):
    """Create a new environment (requires url and a valid status)"""
    return service.create_environment(environment_data)


@router.put("/{environment_id}", response_model=EnvironmentResponse, response_model_exclude_none=True)
def update_environment(
    environment_id: str,
    environment_data: EnvironmentUpdate,
    service: EnvironmentService = Depends(get_environment_service)
):
    """Update any subset of name, url, version, status and notes"""
    return service.update_environment(environment_id, environment_data)


@router.delete("/{environment_id}", status_code=204)
def delete_environment(
    environment_id: str,
    service: EnvironmentService = Depends(get_environment_service)
):
    """Delete environment"""
    service.delete_environment(environment_id)
    return Response(status_code=204)
