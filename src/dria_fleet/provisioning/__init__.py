"""
One-shot host provisioning steps.
"""

from .inference import InferenceServiceLauncher
from .installer import DependencyInstaller
from .pipeline import SetupOptions, SetupPipeline, SetupResult

__all__ = [
    "InferenceServiceLauncher",
    "DependencyInstaller",
    "SetupOptions",
    "SetupPipeline",
    "SetupResult",
]
