"""
Moving sample variables into the features of a descriptor.

`remove_from_samples` is the reduction shared with the kernel code in
`rascaline.descriptor.kernel`: it splits every sample in a block key (the
values of the removed variables) and a reduced sample (the other
variables).

"""

import warnings
from collections import namedtuple
from typing import List, Sequence

import numpy as np

from ..exceptions import InternalError, InvalidParameter
from ..timing import timings
from .indexes import Indexes, IndexValue

__author__ = "The rascaline developers"
__date__ = "2021-03-02"


RemovedSamples = namedtuple(
    "RemovedSamples", ["samples", "block_keys", "old_rows", "new_rows", "keys"])
RemovedSamples.__doc__ = """
Result of removing a set of variables from samples.

  samples      new samples without the variables, in first-seen order
  block_keys   sorted list of the distinct values taken by the variables
  old_rows     position of each sample in the initial samples
  new_rows     position of the corresponding reduced sample in `samples`
  keys         values taken by the variables, one tuple per old sample

"""


def variables_list(variables) -> List[str]:
    """
    Names of sample variables as a list, a single name being accepted as
    well.

    """
    if isinstance(variables, str):
        return [variables]
    return list(variables)


@timings.instrument("remove_from_samples")
def remove_from_samples(samples: Indexes,
                        variables: Sequence[str]) -> RemovedSamples:
    """
    Remove the given `variables` from the `samples`.

    Arguments:
      samples     indexes to reduce
      variables   names of the columns to remove, in the order in which
                  they should appear in the block keys

    Returns:
      A `RemovedSamples` instance.

    Raises `InvalidParameter` if a variable is not part of the samples, or
    if removing the variables would leave non-empty samples without any
    variable.

    """
    variables = variables_list(variables)
    names = samples.names
    positions = []
    for v in variables:
        if v not in names:
            raise InvalidParameter(
                "can not densify along '{}' which is not present in the "
                "samples: [{}]".format(v, ", ".join(names)))
        positions.append(names.index(v))

    kept = [i for i, name in enumerate(names) if name not in variables]
    if len(kept) == 0 and samples.count > 0:
        raise InvalidParameter(
            "can not remove all the variables ({}) from the "
            "samples".format(", ".join(names)))

    values = samples.values
    keys = [tuple(k) for k in values[:, positions].tolist()]

    # reduced samples keep the order in which they are first seen
    new_samples = {}
    new_rows = np.empty(samples.count, dtype=np.intp)
    for i, row in enumerate(values[:, kept].tolist()):
        new_rows[i] = new_samples.setdefault(tuple(row), len(new_samples))

    reduced = Indexes([names[i] for i in kept],
                      np.array(list(new_samples), dtype=IndexValue))

    return RemovedSamples(samples=reduced,
                          block_keys=sorted(set(keys)),
                          old_rows=np.arange(samples.count, dtype=np.intp),
                          new_rows=new_rows,
                          keys=keys)


def _format_variables(variables):
    if len(variables) == 1:
        return variables[0]
    return "({})".format(", ".join(variables))


def _requested_keys(requested, variables) -> List[tuple]:
    requested = np.asarray(requested)
    if requested.ndim != 2 or requested.shape[1] != len(variables):
        got = requested.shape[1] if requested.ndim == 2 else requested.shape
        raise InvalidParameter(
            "provided values in Descriptor.densify must match the variable "
            "size: expected {}, got {}".format(len(variables), got))
    return sorted(set(tuple(int(v) for v in row)
                      for row in requested.tolist()))


def _densified_features(features: Indexes, variables, block_keys) -> Indexes:
    """
    Features for the dense layout: `variables` prepended to the old
    features, one copy of the old features per block key.

    """
    n_old = features.count
    n_vars = len(variables)
    values = np.empty((len(block_keys)*n_old, n_vars + features.size),
                      dtype=IndexValue)
    for b, key in enumerate(block_keys):
        block = values[b*n_old:(b + 1)*n_old]
        block[:, :n_vars] = key
        block[:, n_vars:] = features.values
    return Indexes(list(variables) + list(features.names), values)


def _scatter(array, removed: RemovedSamples, offsets, width, n_columns):
    """
    Copy every row of `array` in the block of its key, in a new zero
    filled array.  Rows whose key has no block are dropped.

    """
    output = np.zeros((removed.samples.count, n_columns))
    starts = np.array([offsets.get(key, -1) for key in removed.keys],
                      dtype=np.intp)
    selected = starts >= 0
    if not np.any(selected):
        return output

    rows = removed.new_rows[selected]
    columns = starts[selected][:, np.newaxis] + np.arange(width)
    output[rows[:, np.newaxis], columns] = array[removed.old_rows[selected]]
    return output


@timings.instrument("Descriptor.densify")
def densify(descriptor, variables: Sequence[str], requested=None):
    """
    Make `descriptor` dense along the given `variables`, replacing its
    samples, features, values and gradients.

    See `Descriptor.densify` for the full documentation.  The descriptor
    is only modified if the whole operation succeeds.

    """
    variables = variables_list(variables)
    if len(variables) == 0 or descriptor.features.count == 0:
        return

    requested_keys = None
    if requested is not None:
        requested_keys = _requested_keys(requested, variables)

    variables_fmt = _format_variables(variables)

    removed = remove_from_samples(descriptor.samples, variables)
    removed_gradients = None
    if descriptor.gradient_samples is not None:
        removed_gradients = remove_from_samples(
            descriptor.gradient_samples, variables)
        if removed_gradients.block_keys != removed.block_keys:
            raise InternalError(
                "gradient samples contains different values for {} than "
                "the samples themselves".format(variables_fmt))

    if requested_keys is not None:
        requested_set = set(requested_keys)
        for key in removed.block_keys:
            if key not in requested_set:
                warnings.warn(
                    "{} takes the value {} in this descriptor, but it is "
                    "not part of the requested features list".format(
                        variables_fmt, ",".join(str(v) for v in key)))
        block_keys = requested_keys
    else:
        block_keys = removed.block_keys

    width = descriptor.features.count
    new_features = _densified_features(
        descriptor.features, variables, block_keys)
    offsets = {key: b*width for b, key in enumerate(block_keys)}

    new_values = _scatter(descriptor.values, removed, offsets, width,
                          new_features.count)

    new_gradients = None
    if descriptor.gradients is not None:
        new_gradients = _scatter(descriptor.gradients, removed_gradients,
                                 offsets, width, new_features.count)

    descriptor._replace(
        values=new_values,
        samples=removed.samples,
        features=new_features,
        gradients=new_gradients,
        gradient_samples=(None if removed_gradients is None
                          else removed_gradients.samples))
