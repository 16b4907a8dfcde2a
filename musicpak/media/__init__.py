"""
Media assets package: audio and cover buffers, format tables, probes.

Key components:
- AudioAsset / CoverAsset / CoverFormat: immutable byte-buffer assets
- import_audio / import_cover: validate raw bytes and build assets
- infer_content_type / infer_image_format / format_byte_size: pure helpers
- MediaAssetStore: file-based imports, one in flight per slot
- probe_audio / probe_image: best-effort mutagen and Pillow readers
"""

from .probe import AudioProbe, probe_audio, probe_image
from .assets import (
    AudioAsset,
    AudioImport,
    CoverAsset,
    CoverFormat,
    MediaAssetStore,
    format_byte_size,
    import_audio,
    import_cover,
    infer_content_type,
    infer_image_format,
    scale_byte_size,
)

__all__ = [
    'AudioAsset',
    'AudioImport',
    'CoverAsset',
    'CoverFormat',
    'MediaAssetStore',
    'format_byte_size',
    'scale_byte_size',
    'import_audio',
    'import_cover',
    'infer_content_type',
    'infer_image_format',
    'AudioProbe',
    'probe_audio',
    'probe_image',
]
