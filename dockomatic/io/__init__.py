"""Public façade for the ``io`` sub-package.

Attributes:
    DataCodec: Abstract reader/writer used to stage inputs and load outputs.
    DefaultCodec: Extension-based dispatcher combining the concrete codecs.
    NibabelCodec: Volumes (NIfTI, Analyze, MGH) via :mod:`nibabel`.
    RawCodec: Byte passthrough for every other artifact.
"""

from .codec import DataCodec, DefaultCodec, NibabelCodec, RawCodec

__all__ = ["DataCodec", "DefaultCodec", "NibabelCodec", "RawCodec"]
