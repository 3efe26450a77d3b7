"""
Node group templating and lifecycle management.
"""

from .controller import FleetController, FleetReport, GroupResult, VERBS
from .generator import FleetTemplateGenerator
from .manifest import discover_groups
from .models import ComposeFile, NodeGroup, ServiceDefinition
from .network import ensure_network

__all__ = [
    "FleetController",
    "FleetReport",
    "GroupResult",
    "VERBS",
    "FleetTemplateGenerator",
    "discover_groups",
    "ComposeFile",
    "NodeGroup",
    "ServiceDefinition",
    "ensure_network",
]
