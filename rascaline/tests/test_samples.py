import unittest

from ..descriptor import (Indexes, StructureSpeciesSamples,
                          TwoBodiesSpeciesSamples)
from .data import OXYGEN, make_systems


class StructureSpeciesTest(unittest.TestCase):

    def test_samples(self):
        systems = make_systems(["water", "CH"])
        samples = StructureSpeciesSamples().samples(systems)
        self.assertEqual(samples, Indexes(
            ["structure", "species"],
            [[0, 1], [0, OXYGEN], [1, 1], [1, 6]]))

    def test_gradients(self):
        systems = make_systems(["water", "CH"])
        samples, gradients = StructureSpeciesSamples().with_gradients(systems)
        self.assertEqual(samples.count, 4)
        self.assertEqual(gradients.names,
                         ("structure", "species", "atom", "spatial"))
        self.assertEqual(gradients.values[::3].tolist(), [
            [0, 1, 1, 0],
            [0, 1, 2, 0],
            [0, OXYGEN, 0, 0],
            [1, 1, 0, 0],
            [1, 6, 1, 0],
        ])
        self.assertEqual(gradients.values[:3, 3].tolist(), [0, 1, 2])


class TwoBodiesSpeciesTest(unittest.TestCase):

    def test_samples(self):
        systems = make_systems(["water", "CH"])
        samples = TwoBodiesSpeciesSamples(3.0).samples(systems)
        self.assertEqual(samples.names, ("structure", "center",
                                         "species_center", "species_neighbor"))
        self.assertEqual(samples.values.tolist(), [
            [0, 0, OXYGEN, 1],
            [0, 1, 1, 1],
            [0, 1, 1, OXYGEN],
            [0, 2, 1, 1],
            [0, 2, 1, OXYGEN],
            [1, 0, 1, 6],
            [1, 1, 6, 1],
        ])

    def test_cutoff(self):
        systems = make_systems(["water"])
        # only the O-H bonds are shorter than the cutoff
        samples = TwoBodiesSpeciesSamples(1.2).samples(systems)
        self.assertEqual(samples.values.tolist(), [
            [0, 0, OXYGEN, 1],
            [0, 1, 1, OXYGEN],
            [0, 2, 1, OXYGEN],
        ])

    def test_gradients(self):
        systems = make_systems(["water"])
        samples, gradients = TwoBodiesSpeciesSamples(3.0).with_gradients(
            systems)
        self.assertEqual(samples.count, 5)
        self.assertEqual(gradients.names[-2:], ("neighbor", "spatial"))
        self.assertEqual(gradients.count, 33)

        # the center comes first, then the neighbors with the right species
        self.assertEqual(gradients.values[::3, [1, 3, 4]].tolist(), [
            [0, 1, 0], [0, 1, 1], [0, 1, 2],
            [1, 1, 1], [1, 1, 2],
            [1, OXYGEN, 1], [1, OXYGEN, 0],
            [2, 1, 2], [2, 1, 1],
            [2, OXYGEN, 2], [2, OXYGEN, 0],
        ])


if __name__ == "__main__":
    unittest.main()
