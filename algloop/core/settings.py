"""Newton solver settings."""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class NewtonSettings:
    """
    Tolerances and limits for the Newton solver.

    Attributes:
        atol: Absolute residual tolerance. Also sets the residual scale
            floor 100·atol.
        rtol: Relative residual tolerance. Also sets the finite difference
            step 100·rtol·yNominal.
        max_iterations: Maximum number of damped Newton steps per solve.
    """

    atol: float = 1e-10
    rtol: float = 1e-6
    max_iterations: int = 50

    def __post_init__(self) -> None:
        if not self.atol > 0:
            raise ValueError(f"atol must be positive, got {self.atol}")
        if not self.rtol > 0:
            raise ValueError(f"rtol must be positive, got {self.rtol}")
        if self.max_iterations < 1:
            raise ValueError(
                f"max_iterations must be at least 1, got {self.max_iterations}"
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "NewtonSettings":
        """
        Build settings from a plain mapping, e.g. a parsed settings file.

        Args:
            mapping: Keys among ``atol``, ``rtol``, ``max_iterations``

        Returns:
            Validated settings; missing keys keep their defaults
        """
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ValueError(
                f"Unknown Newton settings: {', '.join(sorted(unknown))}"
            )
        return cls(
            atol=float(mapping.get("atol", cls.atol)),
            rtol=float(mapping.get("rtol", cls.rtol)),
            max_iterations=int(mapping.get("max_iterations", cls.max_iterations)),
        )

    def replace(self, **changes: Any) -> "NewtonSettings":
        """Return a validated copy with some fields changed."""
        return replace(self, **changes)
