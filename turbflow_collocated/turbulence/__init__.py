"""
Turbulence module for the turbflow collocated closure.

Provides the Launder-Sharma low-Reynolds k-epsilon model with the Yap
near-wall correction, its coefficients and the per-cell kernels it is
built from.
"""

from .coefficients import ModelCoefficients, DEFAULT_COEFFICIENTS
from .launder_sharma_yap import LaunderSharmaKEYap, CycleStage
from .sources import YapCorrection, NoNearWallCorrection
from .transport import NewtonianTransport

__all__ = [
    "ModelCoefficients",
    "DEFAULT_COEFFICIENTS",
    "LaunderSharmaKEYap",
    "CycleStage",
    "YapCorrection",
    "NoNearWallCorrection",
    "NewtonianTransport",
]
