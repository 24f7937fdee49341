"""
Builders for the samples (and gradient samples) of a descriptor.

A calculator picks one of these to decide which rows its descriptor
contains, before filling the values.

"""

import abc
from typing import Optional, Sequence, Tuple

from .indexes import Indexes, IndexesBuilder

__author__ = "The rascaline developers"
__date__ = "2021-02-23"


class SamplesBuilder(abc.ABC):

    @abc.abstractmethod
    def samples(self, systems: Sequence) -> Indexes:
        """
        Samples for the given list of `System`.
        """

    def with_gradients(self, systems) -> Tuple[Indexes, Optional[Indexes]]:
        """
        Samples and gradient samples for the given list of `System`.
        Builders that can not describe gradients return None for the
        gradient samples.

        """
        return self.samples(systems), None


def _add_spatial(builder, row):
    for spatial in range(3):
        builder.add(list(row) + [spatial])


class StructureSpeciesSamples(SamplesBuilder):
    """
    One sample for each atomic species in each structure.

    Samples are (structure, species); gradient samples are (structure,
    species, atom, spatial) with one entry for each atom with this species.
    """

    def samples(self, systems):
        builder = IndexesBuilder(["structure", "species"])
        for i_system, system in enumerate(systems):
            for species in sorted(set(system.species().tolist())):
                builder.add([i_system, species])
        return builder.finish()

    def with_gradients(self, systems):
        samples = self.samples(systems)
        gradients = IndexesBuilder(["structure", "species", "atom", "spatial"])
        for i_system, species in samples.values.tolist():
            atoms_species = systems[i_system].species().tolist()
            for atom, atom_species in enumerate(atoms_species):
                if atom_species == species:
                    _add_spatial(gradients, [i_system, species, atom])
        return samples, gradients.finish()


class TwoBodiesSpeciesSamples(SamplesBuilder):
    """
    One sample for each atom-centered environment and each species of
    neighbor within the cutoff of the central atom.

    Samples are (structure, center, species_center, species_neighbor).
    Gradient samples add (neighbor, spatial): the central atom first, then
    all neighbors with the right species, in the order of the pairs.
    """

    def __init__(self, cutoff: float):
        self.cutoff = cutoff

    def _neighbors(self, system):
        """
        For each atom, the list of its neighbors (first-seen order, without
        duplicates).

        """
        system.compute_neighbors(self.cutoff)
        neighbors = [dict() for _ in range(system.size())]
        for pair in system.pairs():
            neighbors[pair.first].setdefault(pair.second, None)
            neighbors[pair.second].setdefault(pair.first, None)
        return [list(n) for n in neighbors]

    def samples(self, systems):
        return self._build(systems, gradients=False)[0]

    def with_gradients(self, systems):
        return self._build(systems, gradients=True)

    def _build(self, systems, gradients):
        names = ["structure", "center", "species_center", "species_neighbor"]
        samples = IndexesBuilder(names)
        gradient_samples = IndexesBuilder(names + ["neighbor", "spatial"])

        for i_system, system in enumerate(systems):
            species = system.species().tolist()
            for center, neighbors in enumerate(self._neighbors(system)):
                for species_neighbor in sorted(set(species[j] for j in neighbors)):
                    sample = [i_system, center, species[center],
                              species_neighbor]
                    samples.add(sample)
                    if not gradients:
                        continue

                    _add_spatial(gradient_samples, sample + [center])
                    for neighbor in neighbors:
                        if neighbor == center:
                            continue
                        if species[neighbor] == species_neighbor:
                            _add_spatial(gradient_samples, sample + [neighbor])

        if gradients:
            return samples.finish(), gradient_samples.finish()
        return samples.finish(), None
