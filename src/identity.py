"""Resource identity: self-link encoding and decoding.

The only state kept between lifecycle operations is the self-link reported
by the cluster right after the manifest is applied, e.g.:

    /api/v1/namespaces/foo/pods/bar       -> pods/bar in namespace foo
    /apis/apps/v1/deployments/bar         -> deployments/bar, no namespace

Decoding looks at the identifier only, never at the manifest.
"""

import json
from dataclasses import dataclass

from errors import MalformedIdentifier, MissingSelfLink, ResponseDecodeFailure, UnexpectedItemCount


@dataclass(frozen=True)
class ResourceReference:
    """A kubectl-addressable resource.

    Attributes:
        kind_name: "<kind>/<name>" as accepted by kubectl get/delete
        namespace: Namespace, empty for cluster-scoped resources
    """
    kind_name: str
    namespace: str = ''

    def args(self) -> list[str]:
        """kubectl arguments selecting this resource."""
        args = [self.kind_name]
        if self.namespace:
            args += ['-n', self.namespace]
        return args


def encode_identifier(response: bytes) -> str:
    """Extract the self-link from `kubectl get -f - -o json` output.

    Raises:
        ResponseDecodeFailure: Output is not valid JSON
        UnexpectedItemCount: Not exactly one item in the list
        MissingSelfLink: The item has no (or an empty) self-link
    """
    try:
        data = json.loads(response)
    except ValueError as e:
        raise ResponseDecodeFailure(e) from e

    items = data.get('items') if isinstance(data, dict) else None
    if not isinstance(items, list):
        items = []
    if len(items) != 1:
        raise UnexpectedItemCount(len(items))

    item = items[0] if isinstance(items[0], dict) else {}
    metadata = item.get('metadata') or {}
    if not isinstance(metadata, dict):
        metadata = {}
    # kubectl emits selfLink; match the key case-insensitively
    selflink = next((v for k, v in metadata.items() if k.lower() == 'selflink'), None)
    if not selflink or not isinstance(selflink, str):
        raise MissingSelfLink(response)
    return selflink


def decode_identifier(identifier: str) -> ResourceReference:
    """Turn a stored self-link back into a ResourceReference.

    Raises:
        MalformedIdentifier: Fewer than two '/'-separated segments
    """
    parts = identifier.split('/')
    if len(parts) < 2:
        raise MalformedIdentifier(identifier)
    kind_name = f'{parts[-2]}/{parts[-1]}'

    namespace = ''
    for i, part in enumerate(parts):
        if part == 'namespaces' and len(parts) > i + 1:
            namespace = parts[i + 1]
            break
    return ResourceReference(kind_name=kind_name, namespace=namespace)
