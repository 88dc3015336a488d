"""
Core dependencies shared by the route modules
"""

from fastapi import Depends
from sqlalchemy.engine import Engine
from envmonitor.database.engine import get_engine
from envmonitor.modules.environments.store import EnvironmentStore


def get_environment_store(engine: Engine = Depends(get_engine)) -> EnvironmentStore:
    return EnvironmentStore(engine)
