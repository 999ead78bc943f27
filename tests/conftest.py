"""Shared pytest fixtures for k8s-manifest-driver tests."""

import json
import sys
import tempfile
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    monkeypatch.delenv('K8S_MANIFEST_CONFIG', raising=False)
    monkeypatch.delenv('K8S_MANIFEST_STATE_DIR', raising=False)


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    """Redirect tempfile to an empty per-test directory."""
    path = tmp_path / 'tmp'
    path.mkdir()
    monkeypatch.setattr(tempfile, 'tempdir', str(path))
    return path


@pytest.fixture
def get_response():
    """Build `kubectl get -o json` output from a list of self-links."""
    def build(*selflinks: str) -> bytes:
        items = [{'metadata': {'name': 'cm1', 'selfLink': link}} for link in selflinks]
        return json.dumps({'apiVersion': 'v1', 'kind': 'List', 'items': items}).encode()
    return build


@pytest.fixture
def manifest():
    """A single ConfigMap manifest."""
    return """apiVersion: v1
kind: ConfigMap
metadata:
  name: cm1
  namespace: ns1
data:
  key: value
"""
