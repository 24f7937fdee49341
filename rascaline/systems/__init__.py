from .system import Pair, System, UnitCell
from .neighbors import CellList
from .simple import SimpleSystem

__all__ = ["Pair", "System", "UnitCell", "CellList", "SimpleSystem"]
