from .applier import PatchApplier
from .differ import TreeDiffer
from .reader import PatchReader
from .stream import buffered, drain
from .writer import PatchWriter

__all__ = ["PatchApplier", "PatchReader", "PatchWriter", "TreeDiffer", "buffered", "drain"]
