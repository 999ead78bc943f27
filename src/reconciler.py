"""Lifecycle operations for a single-manifest resource.

Each operation receives the resource data and the provider config
explicitly, runs its kubectl invocations sequentially and blocks until they
finish. Errors propagate as ManifestError subclasses; nothing is retried.

State transitions of ManifestResource.id:
    create: ''      -> self-link
    read:   id      -> id, or '' when the object is gone
    update: id      -> id (unchanged)
    delete: id      -> id (caller clears it after success)
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from config import ProviderConfig
from credentials import resolve_credentials
from errors import ManifestError
from identity import decode_identifier, encode_identifier
from kubectl import Kubectl

logger = logging.getLogger(__name__)


@dataclass
class ManifestResource:
    """Resource-level data for one managed manifest.

    Attributes:
        content: Opaque manifest document (sensitive, never logged)
        id: Self-link of the live object, '' when absent
    """
    content: str = field(default='', repr=False)
    id: str = ''

    @property
    def present(self) -> bool:
        return bool(self.id)


@contextmanager
def _kubectl(config: ProviderConfig) -> Iterator[Kubectl]:
    """Kubectl bound to credentials that live for one operation."""
    try:
        global_args, cleanup = resolve_credentials(config)
    except ManifestError as e:
        e.add_context('determining credentials')
        raise
    try:
        yield Kubectl(binary=config.kubectl_path, global_args=global_args)
    finally:
        cleanup()


def create_manifest(resource: ManifestResource, config: ProviderConfig) -> None:
    """Apply the manifest and record the self-link of the created object.

    The apply is not rolled back if identifying the object fails afterwards.
    """
    with _kubectl(config) as kubectl:
        logger.info("[create] Running kubectl apply...")
        kubectl.apply(resource.content)

        logger.info("[create] Looking up applied object...")
        response = kubectl.get_json(resource.content)

    resource.id = encode_identifier(response)
    logger.info(f"[create] Created {resource.id}")


def update_manifest(resource: ManifestResource, config: ProviderConfig) -> None:
    """Re-apply the manifest. The stored id is left as is."""
    with _kubectl(config) as kubectl:
        logger.info(f"[update] Running kubectl apply for {resource.id}...")
        kubectl.apply(resource.content)


def read_manifest(resource: ManifestResource, config: ProviderConfig) -> None:
    """Check the object still exists; clear the id if it doesn't."""
    reference = decode_identifier(resource.id)
    with _kubectl(config) as kubectl:
        logger.info(f"[read] Running kubectl get {reference.kind_name}...")
        output = kubectl.get(reference)

    if not output.strip():
        logger.info(f"[read] {resource.id} no longer exists")
        resource.id = ''


def delete_manifest(resource: ManifestResource, config: ProviderConfig) -> None:
    """Delete the object the stored id points at."""
    reference = decode_identifier(resource.id)
    with _kubectl(config) as kubectl:
        logger.info(f"[delete] Running kubectl delete {reference.kind_name}...")
        kubectl.delete(reference)


def apply_manifest(resource: ManifestResource, config: ProviderConfig) -> str:
    """Converge: refresh, then update if present or create if absent.

    Returns:
        The verb performed ('create' or 'update')
    """
    if resource.present:
        read_manifest(resource, config)
    if resource.present:
        update_manifest(resource, config)
        return 'update'
    create_manifest(resource, config)
    return 'create'


LIFECYCLE = {
    'create': create_manifest,
    'read': read_manifest,
    'update': update_manifest,
    'delete': delete_manifest,
}
