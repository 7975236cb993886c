# This file is part of moleff
# Copyright 2010-2017, Daniele Coslovich

"""Exceptions and warnings raised by the force-field core."""


class ConfigurationError(ValueError):

    """
    Invalid interaction setup, detected once before any evaluation.

    Examples are unresolved species pairs, a non-positive cutoff or a
    `scale14` factor outside [0, 1].
    """


class NumericError(ArithmeticError):

    """
    Non-finite energy or force produced by an evaluation.

    The evaluation is not recovered: the caller decides whether to
    abort or retry with a smaller time step.
    """


class EwaldChargeWarning(RuntimeWarning):

    """Ewald summation applied to a system with a net charge."""
