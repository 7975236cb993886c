# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""
Interactions between particles.

Particles interact via a `Potential`, a function of a single
coordinate (distance, angle or dihedral angle). Pair potentials are
truncated by a `CutOff`, filtered by a topological `Restriction` and
can be tabulated via `TabulatedPotential`. The potentials are
collected by species in an `InteractionRegistry`.

`Interaction` accounts for the total interaction of all the particles
in a system, given the candidate interacting pairs, and optionally
includes electrostatics via `Ewald` summation.
"""

import logging
from moleff.core.utils import NullHandler
from .potential import Potential
from .tabulated import TabulatedPotential
from .cutoff import CutOff
from .restriction import Restriction
from .registry import InteractionRegistry, InteractionEntry
from .ewald import Ewald
from .interaction import Interaction, Result
from .model import from_dict
logging.getLogger(__name__).addHandler(NullHandler())
