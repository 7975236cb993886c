#!/usr/bin/env python

import unittest
import numpy

from moleff.core.errors import ConfigurationError
from moleff.interaction import Potential, TabulatedPotential
from moleff.interaction.potential import _quadrature_tail


class PotentialTest(unittest.TestCase):

    def setUp(self):
        self.potentials = [
            (Potential('lennard_jones', {'epsilon': 1.0, 'sigma': 1.0}), [0.9, 1.12, 1.5, 2.5]),
            (Potential('harmonic', {'k': 5.9, 'x0': 3.0}), [1.0, 2.9, 3.0, 4.5]),
            (Potential('buckingham', {'A': 4.2, 'C': 5e-6, 'rho': 2.3}), [0.5, 1.0, 3.0]),
            (Potential('born', {'A': 4.2, 'C': 5e-6, 'D': 7.6e-5, 'sigma': 3.2, 'rho': 2.3}), [0.5, 1.0, 3.0]),
            (Potential('morse', {'depth': 2.0, 'a': 1.5, 'x0': 1.2}), [0.8, 1.2, 2.0]),
            (Potential('cosine_harmonic', {'k': 3.0, 'x0': 1.9}), [1.0, 1.9, 2.5]),
            (Potential('torsion', {'k': 2.0, 'n': 3, 'delta': 0.3}), [-2.0, 0.1, 1.3]),
        ]

    def test_force_is_derivative(self):
        eps = 1e-6
        for potential, xs in self.potentials:
            for x in xs:
                fd = - (potential.energy(x + eps) - potential.energy(x - eps)) / (2 * eps)
                f = potential.force(x)
                self.assertAlmostEqual(f, fd, delta=1e-6 * max(1.0, abs(f)),
                                       msg='{} at {}'.format(potential, x))

    def test_null(self):
        p = Potential('null')
        for x in [1e-3, 1.0, 10.0]:
            self.assertEqual(p.energy(x), 0.0)
            self.assertEqual(p.force(x), 0.0)
        u, f = p.compute(numpy.array([0.5, 1.0]))
        self.assertEqual(list(u), [0.0, 0.0])
        self.assertEqual(list(f), [0.0, 0.0])

    def test_lennard_jones_minimum(self):
        p = Potential('lj', {'epsilon': 1.0, 'sigma': 1.0})
        u, f = p.compute(2**(1. / 6))
        self.assertAlmostEqual(u, -1.0)
        self.assertAlmostEqual(f, 0.0)

    def test_formulas(self):
        p = Potential('harmonic', {'k': 2.0, 'x0': 1.0})
        self.assertAlmostEqual(p.energy(3.0), 4.0)
        self.assertAlmostEqual(p.force(3.0), -4.0)
        p = Potential('buckingham', {'A': 2.0, 'C': 3.0, 'rho': 0.5})
        self.assertAlmostEqual(p.energy(1.0), 2.0 * numpy.exp(-2.0) - 3.0)
        p = Potential('born_mayer_huggins', {'A': 2.0, 'C': 3.0, 'D': 4.0, 'sigma': 1.5, 'rho': 0.5})
        self.assertAlmostEqual(p.energy(1.0), 2.0 * numpy.exp(1.0) - 3.0 + 4.0)

    def test_vectorized(self):
        p = Potential('lennard_jones', {'epsilon': 1.0, 'sigma': 1.0})
        x = numpy.array([1.0, 1.5, 2.0])
        u, f = p.compute(x)
        for xi, ui, fi in zip(x, u, f):
            self.assertAlmostEqual(ui, p.energy(xi))
            self.assertAlmostEqual(fi, p.force(xi))

    def test_user_function(self):
        def soft(x, epsilon):
            return epsilon / x, epsilon / x**2
        p = Potential(soft, {'epsilon': 2.0})
        self.assertTrue(p.user_defined)
        self.assertEqual(p.name, 'soft')
        self.assertAlmostEqual(p.energy(2.0), 1.0)
        self.assertAlmostEqual(p.force(2.0), 0.5)

    def test_errors(self):
        with self.assertRaises(ConfigurationError):
            Potential('unknown_potential', {})
        with self.assertRaises(ConfigurationError):
            Potential('lennard_jones', {'epsilon': 1.0})
        with self.assertRaises(ConfigurationError):
            Potential('harmonic', {'k': 1.0, 'x0': 1.0}).tail(2.5)

    def test_tail(self):
        rc = 2.5
        p = Potential('lennard_jones', {'epsilon': 1.0, 'sigma': 1.0})
        energy, virial = p.tail(rc)
        self.assertAlmostEqual(energy, 4 * (1 / (9 * rc**9) - 1 / (3 * rc**3)))
        # Closed forms agree with numerical quadrature
        for name, params in [('lennard_jones', {'epsilon': 1.3, 'sigma': 0.9}),
                             ('buckingham', {'A': 4.2, 'C': 5e-2, 'rho': 0.3}),
                             ('born', {'A': 4.2, 'C': 5e-2, 'D': 7.6e-3, 'sigma': 1.2, 'rho': 0.3})]:
            p = Potential(name, params)
            closed = p.tail(rc)
            numeric = _quadrature_tail(p.compute, rc)
            self.assertAlmostEqual(closed[0], numeric[0], places=6)
            self.assertAlmostEqual(closed[1], numeric[1], places=6)
        self.assertEqual(Potential('null').tail(rc), (0.0, 0.0))


class TabulatedPotentialTest(unittest.TestCase):

    def setUp(self):
        self.potential = Potential('lennard_jones', {'epsilon': 1.0, 'sigma': 1.0})

    def _max_error(self, n):
        table = TabulatedPotential(self.potential, 3.0, n)
        x = numpy.linspace(1.0, 2.5, 100001)
        return numpy.max(numpy.abs(table.energy(x) - self.potential.energy(x)))

    def test_grid(self):
        table = TabulatedPotential(self.potential, 8.0, 5000)
        self.assertEqual(len(table.table), 5001)
        self.assertAlmostEqual(table.delta, 8.0 / 5000)
        # Exact on the grid points
        self.assertAlmostEqual(table.energy(2 * table.delta * 1000), self.potential.energy(2.0 * 8.0 / 5))
        # Zero beyond the table
        self.assertEqual(table.energy(8.5), 0.0)
        self.assertEqual(table.force(8.5), 0.0)

    def test_force_is_analytic(self):
        table = TabulatedPotential(self.potential, 3.0, 100)
        for x in [1.01, 1.234, 2.2]:
            self.assertAlmostEqual(table.force(x), self.potential.force(x))

    def test_harmonic_is_exact_at_grid(self):
        harmonic = Potential('harmonic', {'k': 2.0, 'x0': 1.0})
        table = TabulatedPotential(harmonic, 4.0, 4)
        # Linear interpolation of a parabola between 1 and 2
        self.assertAlmostEqual(table.energy(1.5), 0.5 * (0.0 + 1.0))

    def test_convergence(self):
        ratio = self._max_error(1000) / self._max_error(2000)
        self.assertTrue(3.5 < ratio < 4.5, ratio)

    def test_errors(self):
        with self.assertRaises(ConfigurationError):
            TabulatedPotential(self.potential, 3.0, 0)
        with self.assertRaises(ConfigurationError):
            TabulatedPotential(self.potential, -1.0, 10)


if __name__ == '__main__':
    unittest.main()
