"""
Configuration for Beam Search.

This module defines the configuration parameters for the beam search
engine: the time budget, the beam width and the depth discount.
"""
from dataclasses import dataclass


@dataclass
class BeamConfig:
    """
    Configuration parameters for Beam Search.

    This class defines all tunable parameters for the beam search engine,
    with validation and sensible defaults.
    """
    time_limit: float = 0.049
    """Wall-clock budget of one search in seconds"""

    beam_width: int = 1000
    """Number of frontier nodes kept after each round"""

    depth_decay: float = 0.99
    """Score discount per depth level, so shorter paths win ties"""

    max_nodes: int = 300_000
    """Capacity of the node arena"""

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")

        if self.beam_width <= 0:
            raise ValueError("beam_width must be positive")

        if not 0 < self.depth_decay < 1:
            raise ValueError("depth_decay must be between 0 and 1")

        if self.max_nodes <= 1:
            raise ValueError("max_nodes must be greater than 1")

    @classmethod
    def default(cls) -> 'BeamConfig':
        """
        Get the default configuration.

        Returns:
            Default BeamConfig object
        """
        return cls()

    @classmethod
    def greedy(cls) -> 'BeamConfig':
        """
        Get a one-wide beam (greedy one-ply lookahead every round).

        Returns:
            Greedy BeamConfig object
        """
        return cls(beam_width=1)

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'BeamConfig':
        """
        Create a configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            BeamConfig object
        """
        valid_params = {k: v for k, v in config_dict.items()
                        if k in cls.__dataclass_fields__}
        return cls(**valid_params)

    def to_dict(self) -> dict:
        """Convert the configuration to a dictionary."""
        return {name: getattr(self, name) for name in self.__dataclass_fields__}

    def __str__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.to_dict().items())
        return f"BeamConfig({params})"
