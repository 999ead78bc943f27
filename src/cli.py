#!/usr/bin/env python3
"""CLI entry point for k8s-manifest-driver.

Drives the lifecycle verbs for one manifest-backed resource, persisting the
resource id between runs:

    k8s-manifest create -n web -f deployment.yaml
    k8s-manifest read   -n web
    k8s-manifest update -n web -f deployment.yaml
    k8s-manifest delete -n web --yes
    k8s-manifest apply  -n web -f deployment.yaml

Verbs:
- create: Apply the manifest and record the object's self-link
- read: Refresh; forget the id if the object is gone
- update: Re-apply the manifest
- delete: Delete the recorded object
- apply: read, then update or create
"""

import argparse
import json
import logging
import sys
import time
from typing import Optional

from common import ActionResult
from config import ConfigError, ProviderConfig, get_state_dir, load_provider_config
from errors import ManifestError
from reconciler import LIFECYCLE, ManifestResource, apply_manifest
from state import ResourceState, StateError

VERBS = {
    "create": "Apply the manifest and record the object's self-link",
    "read": "Refresh state; forget the id if the object is gone",
    "update": "Re-apply the manifest",
    "delete": "Delete the recorded object",
    "apply": "Read, then update if present or create if absent",
}

# Verbs that stream the manifest to kubectl
NEEDS_MANIFEST = ('create', 'update', 'apply')

# Verbs that operate on a recorded id
NEEDS_ID = ('read', 'update', 'delete')

logger = logging.getLogger(__name__)


def _common_parser(verb: str) -> argparse.ArgumentParser:
    """Build argument parser with common options for all verbs."""
    parser = argparse.ArgumentParser(
        prog=f'k8s-manifest {verb}',
        description=VERBS[verb],
    )
    parser.add_argument(
        '--name', '-n',
        required=True,
        help='Resource instance name (state key)',
    )
    parser.add_argument(
        '--file', '-f',
        help="Manifest file, or '-' for stdin",
    )
    parser.add_argument(
        '--config', '-c',
        help='Provider config YAML (override: K8S_MANIFEST_CONFIG env var)',
    )
    parser.add_argument(
        '--kubeconfig',
        help='Path to kubeconfig file',
    )
    parser.add_argument(
        '--kubeconfig-context', '--context',
        dest='kubeconfig_context',
        help='kubeconfig context name',
    )
    parser.add_argument(
        '--kubectl',
        help='kubectl binary (default: kubectl)',
    )
    parser.add_argument(
        '--state-dir',
        help='State directory (override: K8S_MANIFEST_STATE_DIR env var)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging',
    )
    parser.add_argument(
        '--json-output',
        action='store_true',
        help='Output structured JSON to stdout (logs to stderr)',
    )
    if verb == 'delete':
        parser.add_argument(
            '--yes', '-y',
            action='store_true',
            help='Skip confirmation prompt',
        )
    return parser


def _setup_logging(verbose: bool) -> None:
    """Configure logging. Logs go to stderr so --json-output keeps stdout clean."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _read_manifest_source(path: str) -> str:
    """Read manifest text from a file or stdin ('-')."""
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def _load_config(args) -> ProviderConfig:
    """Provider config from YAML with CLI flag overrides."""
    config = load_provider_config(args.config)
    return config.merged(
        kubeconfig=args.kubeconfig,
        kubeconfig_context=args.kubeconfig_context,
        kubectl_path=args.kubectl,
    )


def run_verb(verb: str, resource: ManifestResource, config: ProviderConfig) -> ActionResult:
    """Run one lifecycle verb and report the outcome.

    ManifestErrors are rendered into the result message here. On a
    successful delete the id is cleared.
    """
    start = time.time()
    previous_id = resource.id
    try:
        if verb == 'apply':
            performed = apply_manifest(resource, config)
        else:
            LIFECYCLE[verb](resource, config)
            performed = verb
    except ManifestError as e:
        return ActionResult(
            success=False,
            message=str(e),
            duration=time.time() - start
        )

    if performed == 'create':
        message = f"Created {resource.id}"
    elif performed == 'update':
        message = f"Updated {resource.id}"
    elif performed == 'delete':
        resource.id = ''
        message = f"Deleted {previous_id}"
    elif resource.present:
        message = f"{resource.id} is present"
    else:
        message = f"{previous_id} no longer exists"

    return ActionResult(
        success=True,
        message=message,
        duration=time.time() - start,
        context_updates={'verb': performed, 'id': resource.id},
    )


def _emit_json(verb: str, result: ActionResult, state: ResourceState) -> None:
    """Print the verb outcome as JSON to stdout."""
    output = {
        'verb': verb,
        'success': result.success,
        'message': result.message,
        'duration_seconds': round(result.duration, 2),
        'resource': state.to_dict(),
    }
    print(json.dumps(output, indent=2))


def verb_main(verb: str, argv: list) -> int:
    """Handle one lifecycle verb."""
    parser = _common_parser(verb)
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = _load_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    state_dir = get_state_dir(args.state_dir)
    try:
        state = ResourceState.load(state_dir, args.name)
    except StateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if verb in NEEDS_ID and not state.id:
        print(f"Error: no recorded resource for '{args.name}' (state: {state_dir})",
              file=sys.stderr)
        return 1
    if verb == 'create' and state.id:
        print(f"Error: '{args.name}' already exists as {state.id}; use update or apply",
              file=sys.stderr)
        return 1

    content = ''
    if verb in NEEDS_MANIFEST:
        if not args.file:
            print("Error: specify a manifest with -f <file> (or -f - for stdin)", file=sys.stderr)
            return 1
        try:
            content = _read_manifest_source(args.file)
        except OSError as e:
            print(f"Error reading manifest: {e}", file=sys.stderr)
            return 1

    if verb == 'delete' and not args.yes:
        # Prompt on stderr; stdout is reserved for --json-output
        print(f"\nWARNING: This will delete {state.id}.", file=sys.stderr)
        sys.stderr.write("Continue? [y/N] ")
        sys.stderr.flush()
        response = input().strip().lower()
        if response != 'y':
            print("Aborted.", file=sys.stderr)
            return 1

    resource = ManifestResource(content=content, id=state.id)
    result = run_verb(verb, resource, config)

    if result.success:
        state.record(resource.id)
        logger.info(result.message)
    else:
        state.fail(result.message)
        logger.error(f"{verb} failed: {result.message}")
    state.save(state_dir)

    if args.json_output:
        _emit_json(verb, result, state)

    return 0 if result.success else 1


def main(argv: Optional[list] = None) -> int:
    """Dispatch to verb handler."""
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ('-h', '--help'):
        print("Usage: k8s-manifest <verb> [options]")
        print()
        print("Verbs:")
        for verb, description in VERBS.items():
            print(f"  {verb:<8}  {description}")
        print()
        print("Run 'k8s-manifest <verb> --help' for verb-specific options.")
        return 1 if not argv else 0

    verb = argv[0]
    if verb not in VERBS:
        print(f"Error: Unknown verb '{verb}'")
        print(f"Available verbs: {', '.join(VERBS)}")
        return 1
    return verb_main(verb, argv[1:])


if __name__ == '__main__':
    sys.exit(main())
