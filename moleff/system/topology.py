# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Bonded topology.

The topology is the bond graph over particle indices. From it we
derive the bond distance between any two particles (1-2, 1-3, 1-4
pairs), the molecules (connected components of the graph) and the
lists of angles and dihedrals. The topology is built once and is
read-only afterwards.
"""

import logging
import numpy

_log = logging.getLogger(__name__)

UNRELATED = 0
"""Bond distance of pairs not connected by at most three bonds."""


class Topology(object):

    def __init__(self, size, bonds=None):
        """
        Build the topology of `size` particles connected by `bonds`, a
        list of (i, j) index pairs.
        """
        self.size = size
        self._neighbors = [set() for _ in range(size)]
        self.bonds = []
        for i, j in (bonds if bonds is not None else []):
            i, j = int(i), int(j)
            if i == j:
                raise ValueError('cannot bond particle %d to itself' % i)
            if not (0 <= i < size and 0 <= j < size):
                raise ValueError('bond (%d, %d) out of range' % (i, j))
            if j in self._neighbors[i]:
                continue
            self._neighbors[i].add(j)
            self._neighbors[j].add(i)
            self.bonds.append((min(i, j), max(i, j)))
        self.bonds.sort()

        self.angles = self._find_angles()
        self.dihedrals = self._find_dihedrals()
        self.molecule = self._find_molecules()
        """Molecule id of each particle."""
        self._setup_distances()
        _log.debug('topology: %d bonds, %d angles, %d dihedrals, %d molecules',
                   len(self.bonds), len(self.angles), len(self.dihedrals),
                   len(set(self.molecule)) if size > 0 else 0)

    def _find_angles(self):
        angles = []
        for j in range(self.size):
            neighbors = sorted(self._neighbors[j])
            for a, i in enumerate(neighbors):
                for k in neighbors[a+1:]:
                    angles.append((i, j, k))
        return sorted(angles)

    def _find_dihedrals(self):
        dihedrals = set()
        for j, k in self.bonds:
            for i in self._neighbors[j]:
                if i == k:
                    continue
                for l in self._neighbors[k]:
                    if l == j or l == i:
                        continue
                    if i < l:
                        dihedrals.add((i, j, k, l))
                    else:
                        dihedrals.add((l, k, j, i))
        return sorted(dihedrals)

    def _find_molecules(self):
        molecule = numpy.full(self.size, -1, dtype=int)
        current = 0
        for start in range(self.size):
            if molecule[start] >= 0:
                continue
            stack = [start]
            molecule[start] = current
            while stack:
                i = stack.pop()
                for j in self._neighbors[i]:
                    if molecule[j] < 0:
                        molecule[j] = current
                        stack.append(j)
            current += 1
        return molecule

    def _setup_distances(self):
        # Breadth-first search limited to three bonds from each particle.
        # Pairs are stored as sorted integer keys i * size + j with i < j.
        keys, values = [], []
        for i in range(self.size):
            seen = {i: 0}
            frontier = [i]
            for depth in (1, 2, 3):
                new = []
                for a in frontier:
                    for b in self._neighbors[a]:
                        if b not in seen:
                            seen[b] = depth
                            new.append(b)
                frontier = new
            for j, depth in seen.items():
                if j > i:
                    keys.append(i * self.size + j)
                    values.append(depth)
        order = numpy.argsort(keys)
        self._keys = numpy.array(keys, dtype=numpy.int64)[order]
        self._distances = numpy.array(values, dtype=int)[order]

    def bond_distance(self, i, j):
        """
        Return the number of bonds separating particles `i` and `j`
        along the shortest path, or `UNRELATED` (0) if they are more
        than three bonds apart or not connected at all.

        `i` and `j` can be integers or integer arrays.
        """
        i = numpy.asarray(i, dtype=numpy.int64)
        j = numpy.asarray(j, dtype=numpy.int64)
        keys = numpy.minimum(i, j) * self.size + numpy.maximum(i, j)
        if len(self._keys) == 0:
            return numpy.zeros_like(keys, dtype=int)
        idx = numpy.searchsorted(self._keys, keys)
        idx = numpy.minimum(idx, len(self._keys) - 1)
        found = self._keys[idx] == keys
        return numpy.where(found, self._distances[idx], UNRELATED)

    def related_pairs(self):
        """
        Return arrays `(i, j)` with i < j of the pairs at most three
        bonds apart.
        """
        return self._keys // self.size, self._keys % self.size

    def molecule_pairs(self):
        """Return arrays `(i, j)` with i < j of all the pairs within a molecule."""
        i, j = [], []
        for m in numpy.unique(self.molecule):
            members = numpy.where(self.molecule == m)[0]
            a, b = numpy.triu_indices(len(members), 1)
            i.append(members[a])
            j.append(members[b])
        if len(i) == 0:
            return numpy.zeros(0, dtype=int), numpy.zeros(0, dtype=int)
        return numpy.concatenate(i), numpy.concatenate(j)

    def same_molecule(self, i, j):
        """Return `True` where particles `i` and `j` belong to the same molecule."""
        return self.molecule[i] == self.molecule[j]

    def __repr__(self):
        return 'Topology(size={0.size}, bonds={0.bonds})'.format(self)
