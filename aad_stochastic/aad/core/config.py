"""
AAD engine configuration

Settings consulted while recording the operator tree and during the backward
pass: the Dirac delta approximation used for the derivative of `choose`
with respect to its trigger, and the memory policy of the gradient map.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Union

from .errors import InvalidArgumentError


class DiracDeltaApproximationMethod(Enum):
    """How the derivative of an indicator at its kink is approximated."""
    ZERO = "ZERO"
    ONE = "ONE"
    DISCRETE_DELTA = "DISCRETE_DELTA"
    REGRESSION_ON_DENSITY = "REGRESSION_ON_DENSITY"
    REGRESSION_ON_DISTRIBUTION = "REGRESSION_ON_DISTRIBUTION"


@dataclass(frozen=True)
class AADConfig:
    """
    Attributes:
        dirac_delta_approximation_method: method for d choose / d trigger.
            Stored as given; an unknown name only fails once a `choose`
            derivative is evaluated.
        dirac_delta_approximation_width_per_std_dev: half-open window width,
            in standard deviations of the trigger, of the discrete delta and of
            the localization used by the regression methods. `inf` makes the
            discrete delta degenerate to ONE, 0 to ZERO.
        dirac_delta_approximation_density_regression_width_per_std_dev: width,
            in standard deviations of the trigger, of the sampling range of the
            density regression.
        density_regression_sample_points: number of sample points per side of
            the kink used by the density regression.
        gradient_retains_leaf_nodes_only: drop the derivative of every inner
            node once it has been propagated to its arguments.
    """
    dirac_delta_approximation_method: Union[DiracDeltaApproximationMethod, str] = \
        DiracDeltaApproximationMethod.DISCRETE_DELTA
    dirac_delta_approximation_width_per_std_dev: float = 0.05
    dirac_delta_approximation_density_regression_width_per_std_dev: float = 0.5
    density_regression_sample_points: int = 50
    gradient_retains_leaf_nodes_only: bool = True

    @classmethod
    def from_properties(cls, properties: Dict[str, Any]) -> "AADConfig":
        """
        Build a config from a property map, e.g.

            AADConfig.from_properties({
                "dirac_delta_approximation_method": "REGRESSION_ON_DENSITY",
                "gradient_retains_leaf_nodes_only": False,
            })
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(properties) - known)
        if unknown:
            raise InvalidArgumentError(f"Unknown AAD configuration properties: {unknown}")
        return cls(**properties)

    def with_properties(self, **properties) -> "AADConfig":
        return replace(self, **properties)
