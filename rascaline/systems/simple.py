"""
In-memory implementation of the `System` interface.

"""

import numpy as np

from .neighbors import CellList
from .system import Pair, System, UnitCell

__author__ = "The rascaline developers"
__date__ = "2021-02-16"


class SimpleSystem(System):
    """
    Atomic system stored as plain arrays, using a `CellList` to find the
    neighbors.

    Arguments:
      species     list of integer species, one per atom
      positions   (N, 3) Cartesian positions
      cell        `UnitCell` or 3x3 matrix of lattice vectors (as rows);
                  None for an isolated system

    """

    def __init__(self, species, positions, cell=None):
        self._species = np.array(species, dtype=int).reshape(-1)
        self._positions = np.array(positions, dtype=float).reshape(-1, 3)
        if len(self._species) != len(self._positions):
            raise ValueError(
                "got {} species for {} positions".format(
                    len(self._species), len(self._positions)))
        if cell is None:
            cell = UnitCell.infinite()
        elif not isinstance(cell, UnitCell):
            cell = UnitCell(cell)
        self._cell = cell
        self._cutoff = None
        self._pairs = None

    def size(self):
        return len(self._species)

    def species(self):
        return self._species

    def positions(self):
        return self._positions

    def cell(self):
        return self._cell

    def compute_neighbors(self, cutoff):
        if self._pairs is not None and self._cutoff == cutoff:
            return

        cell_list = CellList(self._cell, cutoff)
        cell_list.add_atoms(self._positions)

        matrix = self._cell.matrix
        cutoff2 = cutoff*cutoff
        pairs = []
        for pair in cell_list.pairs():
            vector = (self._positions[pair.second]
                      - self._positions[pair.first]
                      + np.dot(pair.shift, matrix))
            if np.dot(vector, vector) < cutoff2:
                pairs.append(Pair(pair.first, pair.second, vector))

        self._cutoff = cutoff
        self._pairs = pairs

    def pairs(self):
        if self._pairs is None:
            raise RuntimeError(
                "compute_neighbors() must be called before pairs()")
        return self._pairs
