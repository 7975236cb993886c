#!/usr/bin/env python

import unittest

from moleff.system import Topology


class TopologyTest(unittest.TestCase):

    def setUp(self):
        # A chain of five particles and an isolated pair
        self.topology = Topology(7, [(0, 1), (1, 2), (3, 2), (3, 4), (5, 6)])

    def test_bond_distance(self):
        t = self.topology
        self.assertEqual(t.bond_distance(0, 1), 1)
        self.assertEqual(t.bond_distance(2, 0), 2)
        self.assertEqual(t.bond_distance(0, 3), 3)
        self.assertEqual(t.bond_distance(0, 4), 0)
        self.assertEqual(t.bond_distance(4, 5), 0)
        self.assertEqual(t.bond_distance(5, 6), 1)
        self.assertEqual(list(t.bond_distance([0, 1, 4], [3, 4, 0])), [3, 3, 0])

    def test_molecules(self):
        t = self.topology
        self.assertEqual(list(t.molecule), [0, 0, 0, 0, 0, 1, 1])
        self.assertTrue(t.same_molecule(0, 4))
        self.assertFalse(t.same_molecule(4, 5))

    def test_terms(self):
        t = self.topology
        self.assertEqual(t.bonds, [(0, 1), (1, 2), (2, 3), (3, 4), (5, 6)])
        self.assertEqual(t.angles, [(0, 1, 2), (1, 2, 3), (2, 3, 4)])
        self.assertEqual(t.dihedrals, [(0, 1, 2, 3), (1, 2, 3, 4)])

    def test_ring(self):
        # In a ring of four, opposite atoms are 1-3 along both paths
        t = Topology(4, [(0, 1), (1, 2), (2, 3), (3, 0)])
        self.assertEqual(t.bond_distance(0, 2), 2)
        self.assertEqual(t.bond_distance(0, 3), 1)
        self.assertEqual(len(t.angles), 4)

    def test_empty(self):
        t = Topology(3)
        self.assertEqual(list(t.bond_distance([0, 1], [1, 2])), [0, 0])
        self.assertEqual(list(t.molecule), [0, 1, 2])
        self.assertEqual(t.angles, [])

    def test_errors(self):
        with self.assertRaises(ValueError):
            Topology(2, [(0, 0)])
        with self.assertRaises(ValueError):
            Topology(2, [(0, 2)])


if __name__ == '__main__':
    unittest.main()
