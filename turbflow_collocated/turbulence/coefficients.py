"""
Launder-Sharma k-epsilon model coefficients and configuration handling.

The configuration source is either a plain dict or the path of a YAML file.
In both cases the coefficients live in the ``LaunderSharmaKEYapCoeffs``
sub-dictionary and the remaining top-level keys are model options.
"""

import math
from dataclasses import dataclass, fields

import yaml

COEFFS_DICT_NAME = "LaunderSharmaKEYapCoeffs"

DEFAULT_COEFFICIENTS = {
    "Cmu": 0.09,
    "C1": 1.44,
    "C2": 1.92,
    "C3": -0.33,
    "alphah": 1.0,
    "alphahk": 1.0,
    "alphaEps": 0.76923,
    "Cyap": 0.83,
    "kappa": 0.41,
}

# C3 multiplies the dilatation term and is allowed any sign
SIGNED_COEFFICIENTS = ("C3",)

DEFAULT_OPTIONS = {
    "turbulence": True,
    "kMin": 1.0e-15,
    "epsilonMin": 1.0e-15,
    "nearWallCorrection": "yap",
    "convectionScheme": "Upwind",
    "limiter": "MUSCL",
    "gradScheme": "leastSquares",
    "ddtScheme": "steadyState",
    "deltaT": None,
    "relaxationFactors": {"k": 1.0, "epsilon": 1.0},
}


@dataclass(frozen=True)
class ModelCoefficients:
    Cmu: float = 0.09
    C1: float = 1.44
    C2: float = 1.92
    C3: float = -0.33
    alphah: float = 1.0
    alphahk: float = 1.0
    alphaEps: float = 0.76923
    Cyap: float = 0.83
    kappa: float = 0.41

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{COEFFS_DICT_NAME}: '{f.name}' must be a finite number, got {value!r}")
            if f.name not in SIGNED_COEFFICIENTS and not value > 0.0:
                raise ValueError(f"{COEFFS_DICT_NAME}: '{f.name}' must be positive, got {value}")

    @property
    def sigma_k(self):
        return 1.0 / self.alphahk

    @property
    def sigma_eps(self):
        return 1.0 / self.alphaEps

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _coerce(name, raw):
    """Return a valid float for one coefficient, falling back to the default with a warning."""
    default = DEFAULT_COEFFICIENTS[name]
    if isinstance(raw, bool):
        print(f"[Warning] {COEFFS_DICT_NAME}: '{name}' = {raw!r} is not a number, using default {default}")
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        print(f"[Warning] {COEFFS_DICT_NAME}: '{name}' = {raw!r} is not a number, using default {default}")
        return default
    if not math.isfinite(value):
        print(f"[Warning] {COEFFS_DICT_NAME}: '{name}' = {raw!r} is not finite, using default {default}")
        return default
    if name not in SIGNED_COEFFICIENTS and value <= 0.0:
        print(f"[Warning] {COEFFS_DICT_NAME}: '{name}' = {value} must be positive, using default {default}")
        return default
    return value


def coefficients_from_dict(coeffs_dict):
    """Build ModelCoefficients from a (possibly partial or invalid) coefficient mapping."""
    coeffs_dict = coeffs_dict or {}
    if not isinstance(coeffs_dict, dict):
        print(f"[Warning] {COEFFS_DICT_NAME} is not a dictionary, using default coefficients")
        coeffs_dict = {}
    for key in coeffs_dict:
        if key not in DEFAULT_COEFFICIENTS:
            print(f"[Warning] {COEFFS_DICT_NAME}: unknown coefficient '{key}' ignored")
    values = {
        name: _coerce(name, coeffs_dict[name]) if name in coeffs_dict else default
        for name, default in DEFAULT_COEFFICIENTS.items()
    }
    return ModelCoefficients(**values)


def load_config(source):
    """
    Read the model configuration from a dict or a YAML file path.

    Returns a fresh top-level dict (the caller may not mutate the source through it).
    """
    if source is None:
        return {}
    if isinstance(source, dict):
        config = source
    else:
        with open(source, "r") as f:
            config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Turbulence configuration must be a mapping, got {type(config).__name__}")
    return dict(config)


def model_options(config):
    """Merge top-level model options over DEFAULT_OPTIONS."""
    options = {key: value for key, value in DEFAULT_OPTIONS.items()}
    options["relaxationFactors"] = dict(DEFAULT_OPTIONS["relaxationFactors"])
    for key, value in config.items():
        if key == COEFFS_DICT_NAME:
            continue
        if key == "relaxationFactors":
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"relaxationFactors must be a mapping of k/epsilon factors, got {value!r}")
            options["relaxationFactors"].update(value or {})
        elif key in options:
            options[key] = value
        else:
            print(f"[Warning] unknown turbulence option '{key}' ignored")
    return options
