"""
Named multi-column integer tables used to label the rows (samples,
gradient samples) and columns (features) of a descriptor.

An `Indexes` is built row by row with an `IndexesBuilder`, and is
immutable once `IndexesBuilder.finish()` returned it.

"""

from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import InternalError

__author__ = "The rascaline developers"
__date__ = "2021-03-02"

IndexValue = np.int32


def is_valid_ident(name: str) -> bool:
    """
    True if `name` is non-empty, does not start with a digit and only
    contains ASCII letters, digits and underscores.

    """
    if not isinstance(name, str) or len(name) == 0:
        return False
    if name[0].isdigit():
        return False
    for c in name:
        if not ((c.isascii() and c.isalnum()) or c == '_'):
            return False
    return True


def _check_names(names):
    names = tuple(names)
    for name in names:
        if not is_valid_ident(name):
            raise InternalError(
                "All indexes names must be valid identifiers, "
                "'{}' is not".format(name))
    return names


class IndexesBuilder(object):

    def __init__(self, names: Sequence[str]):
        """
        Arguments:
          names   names of the index columns, all of them valid
                  identifiers

        """
        self._names = _check_names(names)
        self._rows: List[Tuple[int, ...]] = []
        self._finished = False

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def size(self) -> int:
        """
        Number of columns in a single row.
        """
        return len(self._names)

    def add(self, row: Sequence[int]):
        """
        Append a single row, containing one value per column.

        """
        if self._finished:
            raise InternalError("can not add rows to a finished IndexesBuilder")
        if len(row) != self.size:
            raise InternalError(
                "expected a row with {} values for indexes ({}), "
                "got {}".format(self.size, ", ".join(self._names), len(row)))
        self._rows.append(tuple(int(v) for v in row))

    def finish(self) -> "Indexes":
        if self._finished:
            raise InternalError("this IndexesBuilder was already finished")
        self._finished = True
        values = np.array(self._rows, dtype=IndexValue).reshape(
            len(self._rows), self.size)
        return Indexes(self._names, values)


class Indexes(object):
    """
    An immutable table of integer rows, with one name per column.

    Rows keep their insertion order and do not need to be unique.  Two
    `Indexes` compare equal if they have the same names and the same rows
    in the same order.

    """

    def __init__(self, names: Sequence[str], values=None):
        """
        Arguments:
          names    names of the columns
          values   2-d array-like with one column per name; an empty
                   table is created if None

        """
        self._names = _check_names(names)
        if values is None:
            values = np.zeros((0, len(self._names)), dtype=IndexValue)
        values = np.array(values, dtype=IndexValue)
        if values.size == 0:
            values = values.reshape(0, len(self._names))
        if values.ndim != 2 or values.shape[1] != len(self._names):
            raise InternalError(
                "indexes values must be a 2-d array with {} columns, "
                "got shape {}".format(len(self._names), values.shape))
        if len(self._names) == 0:
            values = values.reshape(0, 0)
        values.flags.writeable = False
        self._values = values
        self._positions = None

    @classmethod
    def empty(cls) -> "Indexes":
        """
        Indexes without any column (and thus without any row).
        """
        return cls([])

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def size(self) -> int:
        """
        Number of columns.
        """
        return len(self._names)

    @property
    def count(self) -> int:
        """
        Number of rows; always 0 if there are no columns.
        """
        if self.size == 0:
            return 0
        return self._values.shape[0]

    @property
    def values(self) -> np.ndarray:
        """
        Read-only (count, size) array with all the rows.
        """
        return self._values

    def value(self, linear: int) -> np.ndarray:
        """
        Get the row at position `linear`.
        """
        return self._values[linear]

    def position(self, row: Sequence[int]) -> Optional[int]:
        """
        Position of the first row equal to `row`, or None if there is no
        such row.

        """
        if self._positions is None:
            positions = {}
            for i, r in enumerate(self._values.tolist()):
                positions.setdefault(tuple(r), i)
            self._positions = positions
        return self._positions.get(tuple(int(v) for v in row))

    def __len__(self):
        return self.count

    def __getitem__(self, linear):
        return self.value(linear)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._values[:self.count])

    def __eq__(self, other):
        if not isinstance(other, Indexes):
            return NotImplemented
        return (self._names == other._names
                and self._values.shape == other._values.shape
                and np.array_equal(self._values, other._values))

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        return "Indexes(names={}, count={})".format(self._names, self.count)

    def to_frame(self) -> pd.DataFrame:
        """
        The indexes as a DataFrame with one column per index name.
        """
        return pd.DataFrame(self._values, columns=list(self._names))

    def to_multiindex(self) -> pd.MultiIndex:
        if self.size == 0:
            return pd.MultiIndex.from_tuples([], names=["index"])
        return pd.MultiIndex.from_frame(self.to_frame())
