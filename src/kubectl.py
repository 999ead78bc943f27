"""kubectl invocations used by the lifecycle operations."""

import logging
from dataclasses import dataclass, field

from common import run_command
from identity import ResourceReference

logger = logging.getLogger(__name__)


def _log_output(output: bytes) -> None:
    """Log kubectl's own report (e.g. 'configmap/cm1 created')."""
    for line in output.decode('utf-8', errors='replace').splitlines():
        if line.strip():
            logger.info(f"kubectl: {line}")


@dataclass
class Kubectl:
    """kubectl bound to a binary and a global argument prefix.

    global_args (credentials) always precede the subcommand arguments.
    stdout is always captured so it never mixes with the caller's output.
    """
    binary: str = 'kubectl'
    global_args: list[str] = field(default_factory=list)

    def command(self, *args: str) -> list[str]:
        return [self.binary] + list(self.global_args) + list(args)

    def apply(self, manifest: str) -> None:
        """kubectl apply -f - with the manifest on stdin."""
        result = run_command(
            self.command('apply', '-f', '-'),
            stdin=manifest.encode('utf-8'),
            capture_stdout=True,
        )
        _log_output(result.stdout)

    def get_json(self, manifest: str) -> bytes:
        """kubectl get -f - -o json for the objects the manifest describes."""
        result = run_command(
            self.command('get', '-f', '-', '-o', 'json'),
            stdin=manifest.encode('utf-8'),
            capture_stdout=True,
        )
        return result.stdout

    def get(self, reference: ResourceReference) -> bytes:
        """kubectl get --ignore-not-found; empty output means absent."""
        result = run_command(
            self.command('get', '--ignore-not-found', *reference.args()),
            capture_stdout=True,
        )
        return result.stdout

    def delete(self, reference: ResourceReference) -> None:
        result = run_command(self.command('delete', *reference.args()), capture_stdout=True)
        _log_output(result.stdout)
