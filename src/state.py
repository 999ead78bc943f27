"""Persisted state for managed manifest resources.

The orchestrating host normally keeps the resource id. When driving the
lifecycle verbs from the CLI, ResourceState takes that role and persists
the id to .states/{name}/resource.json so later read/update/delete runs
can locate the object.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StateError(Exception):
    """Invalid instance name or unreadable state file."""
    pass


@dataclass
class ResourceState:
    """Per-instance state.

    Attributes:
        name: Instance name chosen by the caller
        id: Self-link of the live object, '' when absent
        status: absent, present, or failed
        updated_at: Timestamp of the last lifecycle verb
        error: Error message of the last failed verb
    """
    name: str
    id: str = ''
    status: str = 'absent'
    updated_at: Optional[float] = None
    error: Optional[str] = None

    def record(self, resource_id: str) -> None:
        """Record the id after a successful verb."""
        self.id = resource_id
        self.status = 'present' if resource_id else 'absent'
        self.updated_at = time.time()
        self.error = None

    def fail(self, error: str) -> None:
        """Record a failed verb. The id is kept."""
        self.status = 'failed'
        self.updated_at = time.time()
        self.error = error

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            'name': self.name,
            'id': self.id,
            'status': self.status,
        }
        if self.updated_at is not None:
            d['updated_at'] = self.updated_at
        if self.error is not None:
            d['error'] = self.error
        return d

    @classmethod
    def from_dict(cls, data: dict) -> 'ResourceState':
        return cls(
            name=data['name'],
            id=data.get('id', ''),
            status=data.get('status', 'absent'),
            updated_at=data.get('updated_at'),
            error=data.get('error'),
        )

    @staticmethod
    def path_for(state_dir: Path, name: str) -> Path:
        """State file for an instance. The name must be a single path segment."""
        if name in ('', '.', '..') or '/' in name or '\\' in name:
            raise StateError(f"Invalid resource name: {name!r}")
        return state_dir / name / 'resource.json'

    def save(self, state_dir: Path) -> Path:
        """Save state to JSON file.

        Returns:
            Path where state was saved
        """
        path = self.path_for(state_dir, self.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved resource state to {path}")
        return path

    @classmethod
    def load(cls, state_dir: Path, name: str) -> 'ResourceState':
        """Load state from JSON file, or a fresh absent state if none exists."""
        path = cls.path_for(state_dir, name)
        if not path.exists():
            return cls(name=name)

        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
            state = cls.from_dict(data)
        except (json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError, AttributeError) as e:
            raise StateError(f"Corrupt state file {path}: {e}") from e

        logger.debug(f"Loaded resource state from {path}")
        return state
