"""
Interface between the descriptor code and the atomic systems it runs on.

Any geometry backend (an in-memory structure, an ASE Atoms wrapper, a
simulation engine, ...) can be used by implementing `System`.

"""

import abc
from collections import namedtuple

import numpy as np

__author__ = "The rascaline developers"
__date__ = "2021-02-16"


Pair = namedtuple("Pair", ["first", "second", "vector"])
Pair.__doc__ = """
Pair of atoms coming from a neighbor list.

  first    index of the first atom in the pair
  second   index of the second atom in the pair
  vector   (3,) array going from the first atom to the second one,
           including the periodic image shift

"""


class UnitCell(object):
    """
    Unit cell defining periodic boundary conditions.  The rows of `matrix`
    are the lattice vectors.  A zero matrix denotes an infinite cell, i.e.
    an isolated system without periodic boundary conditions.
    """

    def __init__(self, matrix=None):
        if matrix is None:
            matrix = np.zeros((3, 3))
        self._matrix = np.array(matrix, dtype=float).reshape(3, 3)
        self._infinite = bool(np.all(self._matrix == 0.0))
        if not self._infinite and abs(np.linalg.det(self._matrix)) < 1e-12:
            raise ValueError("the lattice vectors of a unit cell must be "
                             "linearly independent")

    @classmethod
    def infinite(cls):
        return cls()

    def __repr__(self):
        if self._infinite:
            return "UnitCell.infinite()"
        return "UnitCell({})".format(self._matrix.tolist())

    @property
    def matrix(self):
        return self._matrix.copy()

    @property
    def is_infinite(self):
        return self._infinite

    def distances_between_faces(self):
        """
        Distances between opposite faces of the cell, along each lattice
        direction.

        """
        a, b, c = self._matrix
        volume = abs(np.dot(a, np.cross(b, c)))
        return np.array([
            volume/np.linalg.norm(np.cross(b, c)),
            volume/np.linalg.norm(np.cross(c, a)),
            volume/np.linalg.norm(np.cross(a, b)),
        ])

    def fractional(self, positions):
        """
        Convert Cartesian coordinates to fractional lattice coordinates.
        """
        return np.dot(np.asarray(positions, dtype=float),
                      np.linalg.inv(self._matrix))

    def cartesian(self, fractional):
        """
        Convert fractional lattice coordinates to Cartesian coordinates.
        """
        return np.dot(np.asarray(fractional, dtype=float), self._matrix)


class System(abc.ABC):
    """
    Capabilities required from an atomic system.

    `compute_neighbors` must be called before `pairs`; the pairs form a
    half neighbor list (each pair appears once) of all atoms closer than
    the cutoff.
    """

    @abc.abstractmethod
    def size(self) -> int:
        """
        Number of atoms in the system.
        """

    @abc.abstractmethod
    def species(self) -> np.ndarray:
        """
        (size,) integer array with the species of each atom.
        """

    @abc.abstractmethod
    def positions(self) -> np.ndarray:
        """
        (size, 3) array with the Cartesian positions of the atoms.
        """

    @abc.abstractmethod
    def cell(self) -> UnitCell:
        pass

    @abc.abstractmethod
    def compute_neighbors(self, cutoff: float):
        pass

    @abc.abstractmethod
    def pairs(self):
        """
        List of `Pair` computed by the last call to `compute_neighbors`.
        """

    def pairs_containing(self, center: int):
        """
        Pairs in which `center` is either the first or the second atom.
        """
        return [p for p in self.pairs()
                if p.first == center or p.second == center]
