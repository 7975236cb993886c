# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Build interactions from a force-field dictionary.

The dictionary layout is

    {
     "global": {"cutoff": 14.0, "tail_correction": false, "restriction": null},
     "pairs": [{"atoms": ["O", "O"], "lj": {"sigma": 3.16, "epsilon": 0.155}},
               {"atoms": ["H", "H"], "harmonic": {"k": 79.8, "x0": 1.633},
                "restriction": "IntraMolecular"},
               {"atoms": ["H", "O"], "null": {}}],
     "bonds": [{"atoms": ["O", "H"], "harmonic": {"k": 1054.2, "x0": 1.0}}],
     "angles": [{"atoms": ["H", "O", "H"], "harmonic": {"k": 75.9, "x0": 1.911}}],
     "dihedrals": [],
     "coulomb": {"ewald": {"cutoff": 8.5, "kmax": 3}, "restriction": "inter-molecular"},
     "charges": {"O": -0.82, "H": 0.41}
    }

Each entry holds the `atoms` species, exactly one potential (its name
mapped to its parameters) and, for pairs, optional `restriction`,
`cutoff` (a number or `{"shifted": radius}`), `tail_correction` and
`computation` (`{"table": {"max": rmax, "n": n}}`) overrides. All
values are plain numbers in the units of choice.
"""

import logging

from moleff.core.errors import ConfigurationError
from . import library
from .potential import Potential
from .tabulated import TabulatedPotential
from .registry import InteractionRegistry
from .ewald import Ewald

_log = logging.getLogger(__name__)

_pair_options = ['atoms', 'restriction', 'cutoff', 'tail_correction', 'computation']


def _potential(entry, options):
    names = [key for key in entry if key not in options]
    if len(names) != 1:
        raise ConfigurationError('expected one potential in {} (got {})'.format(entry.get('atoms'), names))
    name = names[0]
    if library.aliases.get(name, name) not in library.__all__:
        raise ConfigurationError('unknown potential %s' % name)
    potential = Potential(name, dict(entry[name]))

    computation = entry.get('computation')
    if computation is not None:
        if list(computation.keys()) != ['table']:
            raise ConfigurationError('unknown computation %s' % computation)
        table = computation['table']
        potential = TabulatedPotential(potential, table['max'], table['n'])
    return potential


def from_dict(model):
    """
    Return a tuple `(registry, ewald, charges)` built from the
    force-field dictionary `model`. `ewald` is `None` when no
    coulombic interaction is defined.
    """
    defaults = model.get('global', {})
    registry = InteractionRegistry(cutoff=defaults.get('cutoff'),
                                   restriction=defaults.get('restriction'),
                                   tail_correction=defaults.get('tail_correction', False))

    for entry in model.get('pairs', []):
        potential = _potential(entry, _pair_options)
        registry.add_pair(entry['atoms'], potential,
                          restriction=entry.get('restriction'),
                          cutoff=entry.get('cutoff'),
                          tail_correction=entry.get('tail_correction'))

    for section, add in [('bonds', registry.add_bond),
                         ('angles', registry.add_angle),
                         ('dihedrals', registry.add_dihedral)]:
        for entry in model.get(section, []):
            add(entry['atoms'], _potential(entry, ['atoms', 'computation']))

    ewald = None
    coulomb = model.get('coulomb')
    if coulomb is not None:
        if 'ewald' not in coulomb:
            raise ConfigurationError('unknown coulombic solver in %s' % coulomb)
        parameters = dict(coulomb['ewald'])
        ewald = Ewald(parameters.pop('cutoff'), parameters.pop('kmax'),
                      restriction=coulomb.get('restriction'), **parameters)

    charges = dict(model.get('charges', {}))
    _log.info('force field: %d pair, %d bond, %d angle, %d dihedral entries',
              sum(len(e) for e in registry.pairs.values()),
              sum(len(e) for e in registry.bonds.values()),
              sum(len(e) for e in registry.angles.values()),
              sum(len(e) for e in registry.dihedrals.values()))
    return registry, ewald, charges
