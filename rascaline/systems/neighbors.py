#!/usr/bin/env python

"""
Linked cell list for isolated and periodic structures.

Atoms are assigned to boxes partitioning the unit cell; pairs are only
searched between atoms in the same or in nearby boxes.

"""

import itertools
from collections import namedtuple

import numpy as np

from .system import UnitCell

__author__ = "The rascaline developers"
__date__ = "2021-02-16"


# maximal number of boxes, prevents having too many boxes with a small
# unit cell and a large cutoff
MAX_NUMBER_OF_CELLS = 1e5


CellPair = namedtuple("CellPair", ["first", "second", "shift"])
CellPair.__doc__ = """
Pair produced by the cell list.  The vector between the atoms is
`positions[second] - positions[first] + shift @ cell.matrix`.

"""


def _divmod(a, b):
    """
    Quotient and remainder of the division of each component of `a` by
    `b`, with the remainder taking the sign of `b` (Python convention).

    """
    q = []
    r = []
    for ai, bi in zip(a, b):
        qi, ri = divmod(int(ai), int(bi))
        q.append(qi)
        r.append(ri)
    return tuple(q), tuple(r)


class CellList(object):

    def __init__(self, unit_cell: UnitCell, cutoff: float):
        """
        unit_cell   `UnitCell` defining the periodic boundary conditions
        cutoff      all pairs closer than this distance will be found by
                    `pairs()`

        """
        if unit_cell.is_infinite:
            # pseudo orthorhombic cell with a single box
            distances = np.array([1.0, 1.0, 1.0])
        else:
            distances = unit_cell.distances_between_faces()

        n_cells = np.maximum(np.trunc(distances/cutoff), 1.0)
        if not np.all(np.isfinite(n_cells)):
            raise ValueError("invalid cutoff for cell list: {}".format(cutoff))

        # limit memory consumption, keeping roughly the ratio of boxes in
        # each direction
        if np.prod(n_cells) > MAX_NUMBER_OF_CELLS:
            ratio_x_y = n_cells[0]/n_cells[1]
            ratio_y_z = n_cells[1]/n_cells[2]
            n_cells[2] = np.trunc(np.cbrt(
                MAX_NUMBER_OF_CELLS/(ratio_x_y*ratio_y_z*ratio_y_z)))
            n_cells[1] = np.trunc(ratio_y_z*n_cells[2])
            n_cells[0] = np.trunc(ratio_x_y*n_cells[1])

        # number of boxes to search in each direction for all pairs below
        # the cutoff to be found
        n_search = np.trunc(cutoff*n_cells/distances).astype(int)
        n_cells = n_cells.astype(int)
        for spatial in range(3):
            if n_search[spatial] < 1:
                n_search[spatial] = 1
            # single box and no periodic boundary conditions
            if n_cells[spatial] == 1 and unit_cell.is_infinite:
                n_search[spatial] = 0

        self._unit_cell = unit_cell
        self._cutoff = cutoff
        self._n_cells = tuple(int(n) for n in n_cells)
        self._n_search = tuple(int(n) for n in n_search)
        self._cells = {}

    def __str__(self):
        ostr = "\n Instance of the CellList class\n\n"
        ostr += " cutoff                     : {}\n".format(self._cutoff)
        ostr += " boxes per lattice direction:"
        ostr += " {} {} {}\n".format(*self._n_cells)
        ostr += " boxes searched per direction:"
        ostr += " {} {} {}\n".format(*self._n_search)
        return ostr

    @property
    def num_boxes(self):
        return self._n_cells

    @property
    def num_search(self):
        return self._n_search

    def add_atom(self, index: int, position):
        """
        Add a single atom at the Cartesian `position` to the cell list.
        The atom is identified by its `index`.

        """
        if self._unit_cell.is_infinite:
            fractional = np.asarray(position, dtype=float)
        else:
            fractional = self._unit_cell.fractional(position)

        box = np.floor(fractional*np.array(self._n_cells)).astype(int)
        if self._unit_cell.is_infinite:
            shift = (0, 0, 0)
            box = tuple(int(b) for b in
                        np.clip(box, 0, np.array(self._n_cells) - 1))
        else:
            # wrap atoms outside of the cell back inside
            shift, box = _divmod(box, self._n_cells)

        self._cells.setdefault(box, []).append((index, np.array(shift)))

    def add_atoms(self, positions):
        for i, position in enumerate(positions):
            self.add_atom(i, position)

    def pairs(self):
        """
        Half list of all pairs of atoms in the same or in neighboring
        boxes, as `CellPair`.

        """
        pairs = []
        search = [range(-n, n + 1) for n in self._n_search]
        zero = np.zeros(3, dtype=int)

        for box in itertools.product(*[range(n) for n in self._n_cells]):
            current = self._cells.get(box)
            if not current:
                continue
            for delta in itertools.product(*search):
                cell_shift, neighbor_box = _divmod(
                    np.add(box, delta), self._n_cells)
                neighbors = self._cells.get(neighbor_box)
                if not neighbors:
                    continue
                for atom_i, shift_i in current:
                    for atom_j, shift_j in neighbors:
                        if atom_i > atom_j:
                            continue

                        shift = np.array(cell_shift) + shift_i - shift_j
                        is_zero = np.array_equal(shift, zero)

                        # pairs between an atom and itself only make
                        # sense between different periodic images
                        if atom_i == atom_j and is_zero:
                            continue

                        if self._unit_cell.is_infinite and not is_zero:
                            continue

                        pairs.append(CellPair(atom_i, atom_j, shift))

        return pairs
