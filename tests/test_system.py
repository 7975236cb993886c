#!/usr/bin/env python

import unittest
import numpy

from moleff.system import Particle, Cell, Topology, System


class Test(unittest.TestCase):

    def setUp(self):
        self.particle = [Particle(species='O', position=[0.0, 0.0, 0.0], charge=-0.8),
                         Particle(species='H', position=[1.0, 0.0, 0.0]),
                         Particle(species='H', position=[0.0, 1.0, 0.0])]
        self.system = System(self.particle, Cell([10.0, 10.0, 10.0]),
                             Topology(3, [(0, 1), (0, 2)]))

    def test_dump(self):
        pos = self.system.dump('pos')
        self.assertEqual(pos.shape, (3, 3))
        self.assertTrue(numpy.all(pos == self.system.dump('particle.position')))
        self.assertEqual(list(self.system.dump('spe')), ['O', 'H', 'H'])
        self.assertEqual(list(self.system.dump('box')), [10.0, 10.0, 10.0])
        # Unset charges become nan
        charge = self.system.dump('cha', dtype='float64')
        self.assertEqual(charge[0], -0.8)
        self.assertTrue(numpy.isnan(charge[1]))
        # A copy unless a view is requested
        pos[0, 0] = 5.0
        self.assertEqual(self.particle[0].position[0], 0.0)

    def test_composition(self):
        self.assertEqual(self.system.composition, {'O': 1, 'H': 2})
        self.assertEqual(self.system.distinct_species, ['H', 'O'])
        self.assertAlmostEqual(self.system.density, 3 / 1000.)
        self.assertEqual(self.system.number_of_dimensions, 3)

    def test_density(self):
        self.system.cell = Cell([5.0, 10.0, 20.0])
        self.assertAlmostEqual(self.system.density, 3 / 1000.)
        self.system.particle.append(Particle(species='O', position=[2.0, 0.0, 0.0]))
        self.assertAlmostEqual(self.system.density, 4 / 1000.)
        # Undefined without a cell or without particles
        self.assertEqual(System(self.particle).density, 0.0)
        self.assertEqual(System(cell=Cell([10.0, 10.0, 10.0])).density, 0.0)

    def test_no_interaction(self):
        self.assertEqual(self.system.potential_energy(), 0.0)
        self.assertEqual(self.system.forces().shape, (3, 3))
        self.assertEqual(self.system.virial().shape, (3, 3))
        self.assertAlmostEqual(self.system.pressure(temperature=2.0), 3 * 2.0 / 1000.)

    def test_distance(self):
        rij = self.particle[1].distance(self.particle[2])
        self.assertEqual(list(rij), [1.0, -1.0, 0.0])

    def test_str(self):
        txt = str(self.system)
        self.assertIn('3 particles', txt)
        self.assertIn('bonds: 2', txt)


if __name__ == '__main__':
    unittest.main()
