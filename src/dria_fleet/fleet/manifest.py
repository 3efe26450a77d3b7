"""
Group discovery and the advisory fleet manifest.

The fleet on disk is defined by directory names: every directory under the
nodes dir whose name starts with the group prefix is a group. Nothing else is
consulted to decide what to operate on, so a partially re-run setup stays
consistent. The generator also keeps ``fleet-manifest.json`` next to the
groups; it is only used to warn about drift.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from pydantic import ValidationError

from .models import ManifestEntry

logger = logging.getLogger(__name__)


def discover_groups(nodes_dir: Path, prefix: str) -> List[Path]:
    """Return group directories under ``nodes_dir``, sorted by name."""
    nodes_dir = Path(nodes_dir)
    if not nodes_dir.is_dir():
        return []
    return sorted(
        (p for p in nodes_dir.iterdir() if p.is_dir() and p.name.startswith(prefix)),
        key=lambda p: p.name,
    )


def read_manifest(path: Path) -> Dict[str, ManifestEntry]:
    """Load manifest entries keyed by directory name.

    A missing or unreadable manifest yields an empty mapping; it is advisory.
    """
    path = Path(path)
    if not path.is_file():
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
        entries = [ManifestEntry(**item) for item in data.get("groups", [])]
    except (json.JSONDecodeError, ValidationError, AttributeError, TypeError) as e:
        logger.warning("Ignoring unreadable fleet manifest %s: %s", path, e)
        return {}
    return {entry.directory: entry for entry in entries}


def write_manifest(path: Path, entries: Iterable[ManifestEntry]) -> Path:
    """Merge ``entries`` into the manifest at ``path`` and write it back."""
    path = Path(path)
    merged = read_manifest(path)
    for entry in entries:
        merged[entry.directory] = entry

    document = {"groups": [merged[name].model_dump() for name in sorted(merged)]}
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(document, f, indent=2)
    return path


def report_drift(groups: List[Path], manifest: Dict[str, ManifestEntry]) -> None:
    """Log groups that the manifest and the filesystem disagree about."""
    if not manifest:
        return
    on_disk = {p.name for p in groups}
    for name in sorted(set(manifest) - on_disk):
        logger.warning("Group %s is listed in the fleet manifest but missing on disk", name)
    for name in sorted(on_disk - set(manifest)):
        logger.warning("Group %s exists on disk but is not in the fleet manifest", name)
