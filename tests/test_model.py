#!/usr/bin/env python

import copy
import unittest
import numpy

from moleff.core.errors import ConfigurationError
from moleff.interaction import from_dict, Interaction, TabulatedPotential
from moleff.system import Topology
from brute_force import candidate_pairs, water

_water = {
    "global": {"cutoff": 8.5},
    "pairs": [{"atoms": ["O", "O"], "lj": {"sigma": 3.16, "epsilon": 0.155}},
              {"atoms": ["H", "H"], "harmonic": {"k": 79.8, "x0": 1.633},
               "restriction": "IntraMolecular"},
              {"atoms": ["H", "H"], "null": {}},
              {"atoms": ["H", "O"], "null": {}}],
    "bonds": [{"atoms": ["O", "H"], "harmonic": {"k": 1054.2, "x0": 1.0}}],
    "angles": [{"atoms": ["H", "O", "H"], "harmonic": {"k": 75.9, "x0": 1.911}}],
    "coulomb": {"ewald": {"cutoff": 8.5, "kmax": 3}, "restriction": "inter-molecular"},
    "charges": {"O": -0.82, "H": 0.41}
}

_pairs = {
    "global": {"cutoff": 18.0, "tail_correction": True},
    "pairs": [{"atoms": ["A", "A"], "lj": {"sigma": 3.405, "epsilon": 0.01}},
              {"atoms": ["B", "B"], "buckingham": {"A": 4.2, "C": 5e-6, "rho": 2.3}},
              {"atoms": ["A", "B"], "born": {"A": 1.0, "C": 5e-6, "D": 7.6e-5, "sigma": 3.2, "rho": 2.3},
               "cutoff": {"shifted": 12.0}, "tail_correction": False},
              {"atoms": ["C", "C"], "lj": {"sigma": 3.0, "epsilon": 0.02},
               "computation": {"table": {"max": 20.0, "n": 2000}}}]
}

# Every kind of pair entry between two species
_ab = [{"lj": {"sigma": 3.0, "epsilon": 5.9}},
       {"harmonic": {"x0": 3.0, "k": 5.9}, "tail_correction": False},
       {"null": {}},
       {"buckingham": {"A": 4.2, "C": 5e-6, "rho": 2.3}},
       {"born": {"A": 4.2, "C": 5e-6, "D": 7.6e-5, "sigma": 3.2, "rho": 2.3}},
       {"null": {}, "computation": {"table": {"max": 8.0, "n": 5000}}},
       {"null": {}, "restriction": "intermolecular"},
       {"null": {}, "restriction": "intramolecular"},
       {"null": {}, "restriction": "exclude12"},
       {"null": {}, "restriction": "exclude13"},
       {"null": {}, "restriction": "exclude14"},
       {"null": {}, "restriction": {"scale14": 0.8}},
       {"harmonic": {"x0": 3.0, "k": 5.9}, "cutoff": 18.0},
       {"harmonic": {"x0": 3.0, "k": 5.9}, "cutoff": {"shifted": 18.0}}]
_all_pairs = {
    "global": {"cutoff": 3.0, "tail_correction": True},
    "pairs": [dict(entry, atoms=["A", "B"]) for entry in _ab]
}


class ModelTest(unittest.TestCase):

    def test_water(self):
        registry, ewald, charges = from_dict(_water)
        self.assertEqual(charges, {'O': -0.82, 'H': 0.41})
        self.assertEqual(ewald.cutoff, 8.5)
        self.assertEqual(ewald.kmax, 3)
        self.assertEqual(ewald.restriction.kind, 'intermolecular')
        entries = registry.pair_entries('H', 'H')
        self.assertEqual([e.potential.name for e in entries], ['harmonic', 'null'])
        self.assertEqual(entries[0].restriction.kind, 'intramolecular')
        self.assertEqual(len(registry.pair_entries('O', 'H')), 1)
        self.assertEqual(len(registry.bond_entries('H', 'O')), 1)
        self.assertEqual(len(registry.angle_entries('H', 'O', 'H')), 1)

    def test_water_interaction(self):
        registry, ewald, charges = from_dict(_water)
        position, species, bonds, box = water(nx=2)
        interaction = Interaction(registry, species, Topology(len(species), bonds),
                                  ewald=ewald, charges=charges)
        result = interaction.evaluate(position, candidate_pairs(position, 8.5, box), box=box)
        self.assertTrue(numpy.isfinite(result.energy))
        self.assertLess(numpy.max(numpy.abs(numpy.sum(result.forces, axis=0))), 1e-8)

    def test_pairs(self):
        registry, ewald, charges = from_dict(_pairs)
        self.assertIsNone(ewald)
        self.assertEqual(charges, {})
        aa = registry.pair_entries('A', 'A')[0]
        self.assertEqual(aa.cutoff.radius, 18.0)
        self.assertTrue(aa.cutoff.tail)
        self.assertIsNotNone(aa.tail_integrals)
        ab = registry.pair_entries('B', 'A')[0]
        self.assertEqual(ab.potential.name, 'born_mayer_huggins')
        self.assertEqual(ab.cutoff.scheme, 'cs')
        self.assertEqual(ab.cutoff.radius, 12.0)
        self.assertFalse(ab.cutoff.tail)
        self.assertEqual(registry.pair_entries('B', 'B')[0].potential.name, 'buckingham')
        cc = registry.pair_entries('C', 'C')[0]
        self.assertIsInstance(cc.potential, TabulatedPotential)
        self.assertAlmostEqual(cc.potential.energy(3.5), cc.potential.potential.energy(3.5), places=5)

    def test_all_pair_kinds(self):
        registry, ewald, charges = from_dict(_all_pairs)
        entries = registry.pair_entries('B', 'A')
        self.assertEqual(len(entries), len(_ab))
        self.assertIsNotNone(entries[0].tail_integrals)
        # Harmonic pairs inherit the cutoff but not the tail correction
        for entry in entries[12:]:
            self.assertEqual(entry.potential.name, 'harmonic')
            self.assertEqual(entry.cutoff.radius, 18.0)
            self.assertFalse(entry.cutoff.tail)
            self.assertIsNone(entry.tail_integrals)
        self.assertEqual(entries[13].cutoff.scheme, 'cs')
        self.assertEqual(entries[11].restriction.scale14, 0.8)
        energy, pressure = registry.tail_correction(1000.0, {'A': 10, 'B': 10})
        self.assertTrue(numpy.isfinite(energy))
        self.assertTrue(numpy.isfinite(pressure))

    def test_errors(self):
        model = copy.deepcopy(_pairs)
        model['pairs'][0]['harmonic'] = {'k': 1.0, 'x0': 1.0}
        with self.assertRaises(ConfigurationError):
            from_dict(model)
        model = copy.deepcopy(_pairs)
        model['pairs'][0] = {'atoms': ['A', 'A'], 'gaussian': {}}
        with self.assertRaises(ConfigurationError):
            from_dict(model)
        model = copy.deepcopy(_pairs)
        model['pairs'][0]['lj'] = {'sigma': 1.0}
        with self.assertRaises(ConfigurationError):
            from_dict(model)
        model = copy.deepcopy(_pairs)
        model['pairs'][3]['computation'] = {'spline': {}}
        with self.assertRaises(ConfigurationError):
            from_dict(model)
        model = copy.deepcopy(_water)
        model['coulomb'] = {'wolf': {'cutoff': 8.5}}
        with self.assertRaises(ConfigurationError):
            from_dict(model)
        model = copy.deepcopy(_water)
        del model['global']
        with self.assertRaises(ConfigurationError):
            from_dict(model)


if __name__ == '__main__':
    unittest.main()
