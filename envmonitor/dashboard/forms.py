"""Create/edit form for a single environment, with the same rules the API enforces."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from envmonitor.modules.environments.models import generate_environment_id
from envmonitor.modules.environments.schemas import EnvironmentResponse

MIN_NAME_LENGTH = 3


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


@dataclass
class EnvironmentForm:
    url: str = ""
    status: str = "working"
    name: Optional[str] = ""
    version: Optional[str] = ""
    notes: Optional[str] = ""
    environment_id: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_environment(cls, environment: EnvironmentResponse) -> "EnvironmentForm":
        return cls(
            url=environment.url,
            status=environment.status,
            name=environment.name or "",
            version=environment.version or "",
            notes=environment.notes or "",
            environment_id=environment.id,
        )

    @property
    def is_edit_mode(self) -> bool:
        return self.environment_id is not None

    @property
    def title(self) -> str:
        return "Edit Environment" if self.is_edit_mode else "Create New Environment"

    def validate(self) -> bool:
        self.errors = {}
        if not self.url or not self.url.strip():
            self.errors["url"] = "URL or IP address is required"

        name = (self.name or "").strip()
        if name and len(name) < MIN_NAME_LENGTH:
            self.errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"

        return not self.errors

    def submit(self) -> Optional[Dict[str, Any]]:
        """Validate and build the full record to save, or None when invalid.

        New records get a client-side id that the server replaces with its own.
        Cleared optional fields come back as None.
        """
        if not self.validate():
            return None

        return {
            "id": self.environment_id or generate_environment_id(),
            "name": _clean(self.name),
            "url": self.url.strip(),
            "version": _clean(self.version),
            "status": self.status,
            "notes": _clean(self.notes),
            "lastUpdated": datetime.now(timezone.utc),
        }
