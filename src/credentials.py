"""Credential resolution for kubectl invocations.

Turns a ProviderConfig into the global argument prefix shared by every
invocation of one lifecycle operation:

    --kubeconfig <path> --context <name>

Inline kubeconfig content is written to a temporary file for the duration
of the operation. The returned cleanup removes it and must run once the
invocations are done, whether they succeeded or not.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable

from config import ProviderConfig
from errors import ConflictingCredentials, CredentialMaterializationFailure

logger = logging.getLogger(__name__)


def _noop() -> None:
    pass


def _remover(path: Path) -> Callable[[], None]:
    def cleanup() -> None:
        try:
            path.unlink(missing_ok=True)
            logger.debug(f"Cleaned up temp kubeconfig: {path}")
        except OSError as e:
            logger.warning(f"Failed to remove temp kubeconfig {path}: {e}")
    return cleanup


def create_temp_kubeconfig(content: str) -> tuple[Path, Callable[[], None]]:
    """Write inline kubeconfig content to a uniquely named temporary file.

    Returns:
        (path, cleanup) tuple

    Raises:
        CredentialMaterializationFailure: Create or write failed. The partial
            file has already been removed.
    """
    try:
        fd, name = tempfile.mkstemp(prefix='kubeconfig_')
    except OSError as e:
        raise CredentialMaterializationFailure('creating a kubeconfig file', e) from e

    path = Path(name)
    cleanup = _remover(path)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
    except (OSError, UnicodeError) as e:
        cleanup()
        raise CredentialMaterializationFailure('writing kubeconfig to file', e) from e
    except BaseException:
        cleanup()
        raise
    return path, cleanup


def resolve_credentials(config: ProviderConfig) -> tuple[list[str], Callable[[], None]]:
    """Build the credential argument prefix for one lifecycle operation.

    Returns:
        (args, cleanup) tuple. args is empty when nothing is configured.

    Raises:
        ConflictingCredentials: Both kubeconfig and kubeconfig_content set
        CredentialMaterializationFailure: Inline content could not be written
    """
    if config.kubeconfig and config.kubeconfig_content:
        raise ConflictingCredentials()

    kubeconfig = config.kubeconfig
    cleanup = _noop
    if config.kubeconfig_content:
        path, cleanup = create_temp_kubeconfig(config.kubeconfig_content)
        kubeconfig = str(path)

    args = []
    if kubeconfig:
        args += ['--kubeconfig', kubeconfig]
    if config.kubeconfig_context:
        args += ['--context', config.kubeconfig_context]
    return args, cleanup
