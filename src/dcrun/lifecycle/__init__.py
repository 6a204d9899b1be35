"""Lifecycle layer for dcrun."""

from dcrun.lifecycle.controller import LifecycleController
from dcrun.lifecycle.identity import ContainerIdentityResolver
from dcrun.lifecycle.transfer import ArtifactTransfer
from dcrun.lifecycle.volume import ListingProbe, VolumeInitializer, VolumeProbe

__all__ = [
    "ArtifactTransfer",
    "ContainerIdentityResolver",
    "LifecycleController",
    "ListingProbe",
    "VolumeInitializer",
    "VolumeProbe",
]
