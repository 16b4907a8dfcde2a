"""
Package editing: metadata record, on-disk container, model and session.

Key components:
- Metadata: frozen tag/property record with text-to-int coercion
- PakContainer: zip + YAML manifest container behind the Container protocol
- PackageModel: EMPTY/CLEAN/DIRTY state machine over the four asset slots
- EditorSession: front-end boundary that reports failures as status text
"""

from musicpak.core.config import PACKAGE_EXTENSION

from .metadata import FIELD_NAMES, NUMERIC_FIELDS, TEXT_FIELDS, Metadata
from .container import Container, ContainerFactory, PakContainer
from .model import PackageModel, PackageState
from .session import EditorSession

__all__ = [
    'Metadata',
    'FIELD_NAMES',
    'TEXT_FIELDS',
    'NUMERIC_FIELDS',
    'Container',
    'ContainerFactory',
    'PakContainer',
    'PACKAGE_EXTENSION',
    'PackageModel',
    'PackageState',
    'EditorSession',
]
