import copy
import unittest
import numpy as np

from ..descriptor import (Descriptor, Indexes, StructureSpeciesSamples,
                          TwoBodiesSpeciesSamples, dot)
from ..exceptions import InternalError, InvalidParameter
from .data import make_systems, random_values


def features(count=4):
    return Indexes(["n"], [[i] for i in range(count)])


def two_bodies_descriptor(names=("water", "CH"), seed=0):
    systems = make_systems(names)
    samples, gradients = TwoBodiesSpeciesSamples(3.0).with_gradients(systems)
    descriptor = Descriptor()
    descriptor.prepare_gradients(samples, gradients, features())
    descriptor.values[:] = random_values(descriptor.values.shape, seed)
    descriptor.gradients[:] = random_values(descriptor.gradients.shape,
                                            seed + 1)
    return descriptor


def dense(descriptor, variables):
    descriptor = copy.deepcopy(descriptor)
    descriptor.densify(variables)
    return descriptor


class DotTest(unittest.TestCase):

    def test_without_reduction(self):
        lhs = two_bodies_descriptor(seed=0)
        rhs = two_bodies_descriptor(names=["CH", "water", "CH"], seed=4)

        kernel = dot(lhs, rhs, cores=1)

        self.assertEqual(kernel.samples, lhs.samples)
        self.assertEqual(kernel.features, rhs.samples)
        self.assertIsNone(kernel.gradients)
        np.testing.assert_allclose(kernel.values, lhs.values @ rhs.values.T)

    def test_method(self):
        lhs = two_bodies_descriptor(seed=0)
        rhs = two_bodies_descriptor(seed=2)
        kernel = lhs.dot(rhs, ["species_neighbor"], cores=1)
        reference = dot(lhs, rhs, ["species_neighbor"], cores=1)
        np.testing.assert_array_equal(kernel.values, reference.values)

    def test_same_as_densify(self):
        lhs = two_bodies_descriptor()
        variables = ["species_center", "species_neighbor"]

        kernel = dot(lhs, lhs, variables, gradients=True, cores=1)

        densified = dense(lhs, variables)
        self.assertEqual(kernel.samples, densified.samples)
        self.assertEqual(kernel.features, densified.samples)
        self.assertEqual(kernel.gradient_samples, densified.gradient_samples)
        np.testing.assert_allclose(kernel.values,
                                   densified.values @ densified.values.T)
        np.testing.assert_allclose(kernel.gradients,
                                   densified.gradients @ densified.values.T)

    def test_different_blocks_do_not_mix(self):
        samples = Indexes(["sample", "species"], [[0, 1], [1, 8]])
        lhs = Descriptor()
        lhs.prepare(samples, features(2))
        lhs.values[:] = [[1.0, 2.0], [3.0, 4.0]]

        rhs = Descriptor()
        rhs.prepare(Indexes(["sample", "species"], [[0, 8], [1, 1]]),
                    features(2))
        rhs.values[:] = [[5.0, 6.0], [7.0, 8.0]]

        kernel = dot(lhs, rhs, ["species"], cores=1)

        self.assertEqual(kernel.samples, Indexes(["sample"], [[0], [1]]))
        self.assertEqual(kernel.features, Indexes(["sample"], [[0], [1]]))
        self.assertEqual(kernel.values[0, 0], 0.0)
        self.assertEqual(kernel.values[1, 1], 0.0)
        self.assertEqual(kernel.values[0, 1], 1.0*7.0 + 2.0*8.0)
        self.assertEqual(kernel.values[1, 0], 3.0*5.0 + 4.0*6.0)

    def test_block_only_on_one_side(self):
        lhs = Descriptor()
        lhs.prepare(Indexes(["sample", "species"], [[0, 1], [0, 6]]),
                    features(2))
        lhs.values[:] = [[1.0, 1.0], [2.0, 2.0]]

        rhs = Descriptor()
        rhs.prepare(Indexes(["sample", "species"], [[0, 8], [1, 6]]),
                    features(2))
        rhs.values[:] = [[3.0, 3.0], [1.0, 2.0]]

        kernel = dot(lhs, rhs, ["species"], cores=1)
        np.testing.assert_array_equal(kernel.values, [[0.0, 6.0]])

    def test_normalize(self):
        lhs = two_bodies_descriptor()
        variables = ["species_neighbor"]

        kernel = dot(lhs, lhs, variables, normalize=True, cores=1)
        np.testing.assert_allclose(np.diag(kernel.values), 1.0)

        densified = dense(lhs, variables)
        norm = np.linalg.norm(densified.values, axis=1)
        np.testing.assert_allclose(
            kernel.values,
            densified.values @ densified.values.T/np.outer(norm, norm))

    def test_normalize_gradients(self):
        lhs = two_bodies_descriptor(seed=0)
        rhs = two_bodies_descriptor(names=["CH", "water"], seed=7)
        variables = ["species_center", "species_neighbor"]

        kernel = dot(lhs, rhs, variables, gradients=True, normalize=True,
                     cores=1)

        dense_lhs = dense(lhs, variables)
        dense_rhs = dense(rhs, variables)
        norm_lhs = np.linalg.norm(dense_lhs.values, axis=1)
        norm_rhs = np.linalg.norm(dense_rhs.values, axis=1)

        # both sides contain the same species pairs, the dense features
        # are the same
        self.assertEqual(dense_lhs.features, dense_rhs.features)
        np.testing.assert_allclose(
            kernel.values,
            dense_lhs.values @ dense_rhs.values.T/np.outer(norm_lhs, norm_rhs))

        owners = [dense_lhs.samples.position(sample[:2])
                  for sample in dense_lhs.gradient_samples.values.tolist()]
        np.testing.assert_allclose(
            kernel.gradients,
            dense_lhs.gradients @ dense_rhs.values.T
            / np.outer(norm_lhs[owners], norm_rhs))

    def test_inputs_are_not_modified(self):
        lhs = two_bodies_descriptor(seed=0)
        rhs = two_bodies_descriptor(seed=1)
        reference_lhs = copy.deepcopy(lhs)
        reference_rhs = copy.deepcopy(rhs)

        dot(lhs, rhs, ["species_neighbor"], gradients=True, normalize=True,
            cores=1)

        np.testing.assert_array_equal(lhs.values, reference_lhs.values)
        np.testing.assert_array_equal(lhs.gradients, reference_lhs.gradients)
        np.testing.assert_array_equal(rhs.values, reference_rhs.values)
        self.assertEqual(lhs.samples, reference_lhs.samples)
        self.assertEqual(rhs.samples, reference_rhs.samples)

    def test_threads(self):
        lhs = two_bodies_descriptor(names=["water", "CH", "water"], seed=0)
        rhs = two_bodies_descriptor(seed=5)
        variables = ["species_neighbor"]

        serial = dot(lhs, rhs, variables, gradients=True, normalize=True,
                     cores=1)
        parallel = dot(lhs, rhs, variables, gradients=True, normalize=True,
                       cores=4)

        np.testing.assert_allclose(parallel.values, serial.values)
        np.testing.assert_allclose(parallel.gradients, serial.gradients)

    def test_single_name(self):
        lhs = two_bodies_descriptor(seed=0)
        rhs = two_bodies_descriptor(seed=3)
        kernel = dot(lhs, rhs, "species_neighbor", cores=1)
        reference = dot(lhs, rhs, ["species_neighbor"], cores=1)
        self.assertEqual(kernel.samples, reference.samples)
        np.testing.assert_array_equal(kernel.values, reference.values)

    def test_reduce_all_variables(self):
        lhs = Descriptor()
        lhs.prepare(Indexes(["structure", "species"], [[0, 1], [0, 6]]),
                    features(2))
        lhs.values[:] = 1.0
        values = lhs.values.copy()

        with self.assertRaises(InvalidParameter):
            dot(lhs, lhs, ["structure", "species"], cores=1)
        np.testing.assert_array_equal(lhs.values, values)

    def test_errors(self):
        lhs = two_bodies_descriptor()

        other = Descriptor()
        other.prepare(lhs.samples, features(3))
        with self.assertRaises(InvalidParameter):
            dot(lhs, other)

        systems = make_systems(["water"])
        rhs = Descriptor()
        rhs.prepare(StructureSpeciesSamples().samples(systems), features())

        with self.assertRaises(InvalidParameter) as cm:
            dot(lhs, rhs, ["species"])
        self.assertIn("left hand side", str(cm.exception))

        with self.assertRaises(InvalidParameter) as cm:
            dot(lhs, rhs, ["species_neighbor"])
        self.assertIn("right hand side", str(cm.exception))

        with self.assertRaises(InvalidParameter):
            dot(rhs, lhs, gradients=True)

    def test_missing_gradient_owner(self):
        lhs = Descriptor()
        lhs.prepare_gradients(
            Indexes(["structure", "atom"], [[0, 0]]),
            Indexes(["structure", "atom", "neighbor", "spatial"],
                    [[0, 5, 0, 0]]),
            features(2))
        lhs.values[:] = 1.0

        # the kernel itself does not need the owner of gradient samples
        dot(lhs, lhs, gradients=True, cores=1)

        with self.assertRaises(InternalError):
            dot(lhs, lhs, gradients=True, normalize=True, cores=1)

    def test_unexpected_gradient_samples(self):
        lhs = Descriptor()
        lhs.prepare_gradients(
            Indexes(["structure", "atom"], [[0, 0]]),
            Indexes(["structure", "spatial"], [[0, 0]]),
            features(2))
        lhs.values[:] = 1.0

        with self.assertRaises(InternalError):
            dot(lhs, lhs, gradients=True, normalize=True, cores=1)


if __name__ == "__main__":
    unittest.main()
