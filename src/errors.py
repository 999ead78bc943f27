"""Error types for manifest reconciliation.

Every failure in the lifecycle core is one of the ManifestError subclasses
below. Each keeps its structured payload as attributes so callers can match
on the kind of failure; the human-readable message is only produced by
str() at the boundary (CLI output, host error reporting).

Context is chained with add_context(), e.g.:
    determining credentials: both kubeconfig and kubeconfig_content are defined
"""

from typing import Optional


class ManifestError(Exception):
    """Base class for lifecycle errors."""

    def __init__(self):
        super().__init__()
        self.context: list[str] = []

    def add_context(self, prefix: str) -> 'ManifestError':
        """Prepend a context prefix to the rendered message."""
        self.context.insert(0, prefix)
        return self

    def describe(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return ': '.join(self.context + [self.describe()])


class InvocationFailure(ManifestError):
    """External command exited nonzero (or could not be started).

    Attributes:
        command: Full argv of the invocation
        returncode: Exit status, None if the process never started
        stderr: Captured standard error bytes
        cause: OS error when the process could not be started
    """

    def __init__(
        self,
        command: list[str],
        returncode: Optional[int] = None,
        stderr: bytes = b'',
        cause: Optional[BaseException] = None,
    ):
        super().__init__()
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        self.cause = cause

    @property
    def command_line(self) -> str:
        return ' '.join(self.command)

    @property
    def exit_cause(self) -> str:
        if self.cause is not None:
            return str(self.cause)
        return f'exit status {self.returncode}'

    def describe(self) -> str:
        if not self.stderr:
            return f'{self.command_line}: {self.exit_cause}'
        stderr = self.stderr.decode('utf-8', errors='replace')
        return f'{self.command_line} {self.exit_cause}: {stderr}'


class ConflictingCredentials(ManifestError):
    """Both a kubeconfig path and inline kubeconfig content were supplied."""

    def describe(self) -> str:
        return ('both kubeconfig and kubeconfig_content are defined, '
                'please use only one of the parameters')


class CredentialMaterializationFailure(ManifestError):
    """Inline kubeconfig content could not be written to a temporary file."""

    def __init__(self, stage: str, cause: BaseException):
        super().__init__()
        self.stage = stage
        self.cause = cause

    def describe(self) -> str:
        return f'{self.stage}: {self.cause}'


class ResponseDecodeFailure(ManifestError):
    """kubectl get -o json returned something that is not JSON."""

    def __init__(self, cause: BaseException):
        super().__init__()
        self.cause = cause

    def describe(self) -> str:
        return f'decoding response: {self.cause}'


class UnexpectedItemCount(ManifestError):
    """The applied manifest did not resolve to exactly one live object."""

    def __init__(self, count: int):
        super().__init__()
        self.count = count

    def describe(self) -> str:
        return f'expected to create 1 resource, got {self.count}'


class MissingSelfLink(ManifestError):
    """The single returned object carries no self-link."""

    def __init__(self, response: bytes):
        super().__init__()
        self.response = response

    def describe(self) -> str:
        text = self.response.decode('utf-8', errors='replace')
        return f'could not parse self-link from response {text}'


class MalformedIdentifier(ManifestError):
    """Stored resource id has fewer than two path segments."""

    def __init__(self, identifier: str):
        super().__init__()
        self.identifier = identifier

    def describe(self) -> str:
        return f'invalid resource id: {self.identifier}'
