"""
Kernels (dot products) between descriptors.

`dot` computes the same matrix as densifying both descriptors along
`reduce_across` and multiplying the dense values, without creating the
dense arrays: only pairs of rows sharing the same values of the
`reduce_across` variables (the same block) contribute.

"""

import functools
from multiprocessing.pool import ThreadPool
from typing import Optional, Sequence

import numpy as np

from .. import config
from ..exceptions import InternalError, InvalidParameter
from ..timing import timings
from .densify import remove_from_samples, variables_list
from .descriptor import Descriptor

__author__ = "The rascaline developers"
__date__ = "2021-03-09"


def _block_ids(removed, ids):
    """
    Replace the block keys of `removed` by integer ids, allocating new ids
    in `ids` in the order in which keys are first seen.

    """
    return np.array([ids.setdefault(key, len(ids)) for key in removed.keys],
                    dtype=np.intp)


def _rows_tasks(removed, block_ids, n_rows):
    """
    Group (old row, block id) pairs by the output row they contribute to.
    """
    tasks = [(row, []) for row in range(n_rows)]
    for old, new, block in zip(removed.old_rows.tolist(),
                               removed.new_rows.tolist(),
                               block_ids.tolist()):
        tasks[new][1].append((old, block))
    return tasks


def _rhs_blocks(values, removed, block_ids):
    """
    Rows of the right hand side, grouped by block id.

    Returns:
      dict {block id: (rhs values in this block, output column of each
      of these rows)}

    """
    blocks = {}
    for block in np.unique(block_ids):
        selected = block_ids == block
        blocks[int(block)] = (values[removed.old_rows[selected]],
                              removed.new_rows[selected])
    return blocks


def _dot_row(lhs, rhs_blocks, output, task):
    """
    Fill a single row of `output`.  Only this row is written to, so that
    different rows can be computed concurrently.

    """
    row, contributions = task
    out = output[row]
    for old_lhs, block in contributions:
        if block not in rhs_blocks:
            continue
        rhs, columns = rhs_blocks[block]
        np.add.at(out, columns, rhs @ lhs[old_lhs])


def _compute_norm(values, removed, block_ids, size):
    """
    2-norm of each reduced row, using only products between rows in the
    same block.

    """
    sums = {}
    for old, new, block in zip(removed.old_rows.tolist(),
                               removed.new_rows.tolist(),
                               block_ids.tolist()):
        key = (new, block)
        if key in sums:
            sums[key] = sums[key] + values[old]
        else:
            sums[key] = values[old].copy()

    norm = np.zeros(size)
    for (new, _), summed in sums.items():
        norm[new] += summed @ summed
    return np.sqrt(norm)


def _gradients_norm(output, norm_lhs):
    """
    For each gradient sample of `output`, the norm of the value sample
    it is the gradient of.

    """
    gradient_samples = output.gradient_samples
    # the two last gradient samples variables are atom/neighbor and spatial
    size = gradient_samples.size
    if size != output.samples.size + 2 or \
       gradient_samples.names[-1] != "spatial":
        raise InternalError(
            "unexpected gradient samples [{}] for samples [{}]".format(
                ", ".join(gradient_samples.names),
                ", ".join(output.samples.names)))

    norm = np.empty(gradient_samples.count)
    for i, sample in enumerate(gradient_samples.values[:, :size - 2].tolist()):
        position = output.samples.position(sample)
        if position is None:
            raise InternalError(
                "gradient sample {} does not correspond to a value "
                "sample".format(gradient_samples[i].tolist()))
        norm[i] = norm_lhs[position]
    return norm


def _run(pool, kernel, tasks):
    if pool is None:
        for task in tasks:
            kernel(task)
    else:
        pool.map(kernel, tasks)


@timings.instrument("Descriptor.dot")
def dot(lhs: Descriptor, rhs: Descriptor,
        reduce_across: Sequence[str] = (),
        gradients: bool = False,
        normalize: bool = False,
        cores: Optional[int] = None) -> Descriptor:
    """
    Compute the dot product between `lhs` and `rhs`, as if both were
    densified along `reduce_across` before.

    Parameters
    ----------
    lhs, rhs : Descriptor
        Descriptors with the same features.  They are not modified.
    reduce_across : str or list of str
        Sample variables to move to the features before taking the dot
        product, e.g. neighbor species.
    gradients : bool
        Also compute the dot product between the gradients of `lhs` and
        the values of `rhs`.
    normalize : bool
        Divide the result by the norms of the corresponding densified rows
        of `lhs` and `rhs`, giving a cosine kernel.
    cores : int, optional
        Number of worker threads; defaults to the `parallel.num_threads`
        setting.

    Returns
    -------
    Descriptor
        The kernel, with the reduced `lhs` samples as samples, the reduced
        `rhs` samples as features, and the reduced `lhs` gradient samples
        as gradient samples if `gradients` is True.

    Raises
    ------
    InvalidParameter
        If the features differ, if one of the `reduce_across` variables is
        missing from the samples of either side, if `reduce_across`
        contains all the sample variables of a side with samples, or if
        gradients are requested but `lhs` has none.
    """
    reduce_across = variables_list(reduce_across)

    if lhs.features != rhs.features:
        raise InvalidParameter(
            "descriptors have different features, the dot product between "
            "them is not well defined")

    for variable in reduce_across:
        if variable not in lhs.samples.names:
            raise InvalidParameter(
                "'{}' does not appear on the left hand side samples for "
                "this dot product".format(variable))
        if variable not in rhs.samples.names:
            raise InvalidParameter(
                "'{}' does not appear on the right hand side samples for "
                "this dot product".format(variable))

    if gradients and lhs.gradients is None:
        raise InvalidParameter(
            "the left hand side descriptor does not contain gradient data, "
            "but the dot product requested it")

    if cores is None:
        cores = config.num_threads()

    removed_lhs = remove_from_samples(lhs.samples, reduce_across)
    removed_rhs = remove_from_samples(rhs.samples, reduce_across)
    removed_grad = None
    if gradients:
        removed_grad = remove_from_samples(lhs.gradient_samples, reduce_across)

    output = Descriptor()
    if removed_grad is not None:
        output.prepare_gradients(removed_lhs.samples, removed_grad.samples,
                                 removed_rhs.samples)
    else:
        output.prepare(removed_lhs.samples, removed_rhs.samples)

    # integer ids make the block comparison cheap in the loops below
    ids = {}
    lhs_ids = _block_ids(removed_lhs, ids)
    rhs_ids = _block_ids(removed_rhs, ids)
    grad_ids = None
    if removed_grad is not None:
        grad_ids = _block_ids(removed_grad, ids)

    rhs_blocks = _rhs_blocks(rhs.values, removed_rhs, rhs_ids)

    pool = ThreadPool(processes=cores) if cores > 1 else None
    try:
        kernel = functools.partial(_dot_row, lhs.values, rhs_blocks,
                                   output.values)
        _run(pool, kernel,
             _rows_tasks(removed_lhs, lhs_ids, output.samples.count))

        if removed_grad is not None:
            kernel = functools.partial(_dot_row, lhs.gradients, rhs_blocks,
                                       output.gradients)
            _run(pool, kernel, _rows_tasks(
                removed_grad, grad_ids, output.gradient_samples.count))
    finally:
        if pool is not None:
            pool.close()
            pool.join()

    if normalize:
        norm_lhs = _compute_norm(lhs.values, removed_lhs, lhs_ids,
                                 output.samples.count)
        norm_rhs = _compute_norm(rhs.values, removed_rhs, rhs_ids,
                                 output.features.count)
        output.values /= np.outer(norm_lhs, norm_rhs)

        if output.gradients is not None:
            norm_grad = _gradients_norm(output, norm_lhs)
            output.gradients /= np.outer(norm_grad, norm_rhs)

    return output
