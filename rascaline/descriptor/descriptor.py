"""
Container for the values of a representation computed on a set of
atomic systems, together with the indexes describing them.

"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..exceptions import InternalError, InvalidParameter
from .indexes import Indexes
from . import densify as _densify

__author__ = "The rascaline developers"
__date__ = "2021-03-02"


class Descriptor(object):
    """
    Values of a representation, stored as a dense 2-d array, with one row
    per sample and one column per feature.

    Attributes:

      values            (samples.count, features.count) array
      samples           `Indexes` describing the rows of `values`
      features          `Indexes` describing the columns of `values`
      gradients         (gradient_samples.count, features.count) array with
                        the gradients of the values with respect to atomic
                        positions, or None
      gradient_samples  `Indexes` describing the rows of `gradients`, or
                        None; the last index is always "spatial"

    A descriptor is created empty, shaped by a calculator through
    `prepare` or `prepare_gradients`, and filled in place.  `prepare`,
    `prepare_gradients` and `densify` allocate new arrays, so that arrays
    taken from the descriptor before these calls no longer reflect its
    content.
    """

    def __init__(self):
        self.values = np.zeros((0, 0))
        self.samples = Indexes.empty()
        self.features = Indexes.empty()
        self.gradients = None
        self.gradient_samples = None

    def __repr__(self):
        ostr = "Descriptor(samples={}, features={}".format(
            self.samples.names, self.features.names)
        if self.gradient_samples is not None:
            ostr += ", gradient_samples={}".format(self.gradient_samples.names)
        return ostr + ", shape={})".format(self.values.shape)

    @property
    def has_gradients(self) -> bool:
        return self.gradients is not None

    def prepare(self, samples: Indexes, features: Indexes):
        """
        Set the samples and features, allocate zero-filled values and
        remove any gradient data.

        """
        self._replace(
            values=np.zeros((samples.count, features.count)),
            samples=samples,
            features=features,
            gradients=None,
            gradient_samples=None)

    def prepare_gradients(self, samples: Indexes, gradient_samples: Indexes,
                          features: Indexes):
        """
        Same as `prepare`, also allocating zero-filled gradients for the
        given `gradient_samples`.

        """
        if gradient_samples.size == 0 or gradient_samples.names[-1] != "spatial":
            raise InternalError(
                "the last index of gradient samples should be 'spatial', "
                "got [{}]".format(", ".join(gradient_samples.names)))

        self._replace(
            values=np.zeros((samples.count, features.count)),
            samples=samples,
            features=features,
            gradients=np.zeros((gradient_samples.count, features.count)),
            gradient_samples=gradient_samples)

    def _replace(self, values, samples, features, gradients,
                 gradient_samples):
        self.values = values
        self.samples = samples
        self.features = features
        self.gradients = gradients
        self.gradient_samples = gradient_samples

    def densify(self, variables: Sequence[str], requested=None):
        """
        Make this descriptor dense along the given `variables`.

        This "moves" the variables from the samples to the features,
        filling the new features with zeros where the corresponding sample
        is missing.

        Parameters
        ----------
        variables : str or list of str
            Names of the sample variables to move to the features.
        requested : array-like, optional
            Values taken by the `variables` that should be part of the new
            features, with one row per new feature block and one column per
            variable.  Defaults to the set of values taken by the variables
            in the samples.  Values present in the samples but not
            requested are dropped with a warning; requested values without
            samples give blocks of zeros.

        Raises
        ------
        InvalidParameter
            If one of the variables is not part of the samples, if the
            variables are all the sample variables of a descriptor with
            samples, or if `requested` does not have one column per
            variable.

        Example
        -------
        With samples (structure, species), features (n, l) and::

            structure  species |  n=0 l=0   n=1 l=1
                0         1    |     1         2
                0         6    |     3         4
                1         6    |     5         6
                1         8    |     7         8

        ``descriptor.densify(["species"])`` gives one sample per structure
        and one block of features per species::

                      species |   1       6       8
            structure         |
                0             |  1  2    3  4    0  0
                1             |  0  0    5  6    7  8

        New samples are in the order in which they first appear; feature
        blocks are sorted by the values of the variables, and the old
        features keep their order inside each block.
        """
        _densify.densify(self, variables, requested)

    def dot(self, other: "Descriptor", reduce_across: Sequence[str] = (),
            gradients: bool = False, normalize: bool = False,
            cores: Optional[int] = None) -> "Descriptor":
        """
        Kernel between this descriptor and `other`, see
        `rascaline.descriptor.kernel.dot`.

        """
        from .kernel import dot
        return dot(self, other, reduce_across=reduce_across,
                   gradients=gradients, normalize=normalize, cores=cores)

    def to_dataframe(self, gradients: bool = False) -> pd.DataFrame:
        """
        The values (or gradients) as a DataFrame, with the samples (or
        gradient samples) as row index and the features as columns.

        """
        if gradients:
            if self.gradients is None:
                raise InvalidParameter(
                    "this descriptor does not contain gradient data")
            array, rows = self.gradients, self.gradient_samples
        else:
            array, rows = self.values, self.samples
        return pd.DataFrame(array, index=rows.to_multiindex(),
                            columns=self.features.to_multiindex())
