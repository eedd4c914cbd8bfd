"""
Configuration for Monte Carlo Tree Search (MCTS).

This module defines the configuration parameters for the MCTS algorithm:
the simulation budget, the UCB1 exploration constant and an optional seed
for reproducible searches.
"""
from dataclasses import dataclass, fields
from typing import Optional

from connect4_ai.core.constants import DEFAULT_SIMULATION_COUNT, DEFAULT_EXPLORATION_WEIGHT


@dataclass
class MCTSConfig:
    """
    Configuration parameters for Monte Carlo Tree Search.

    The search always runs exactly `iterations` iterations; there is no
    time limit and no early exit.
    """
    iterations: int = DEFAULT_SIMULATION_COUNT
    """Number of MCTS iterations to perform per move decision"""

    exploration_weight: float = DEFAULT_EXPLORATION_WEIGHT
    """UCB1 exploration parameter (default is ~sqrt(2))"""

    seed: Optional[int] = None
    """Seed for the search's random generator (None = unseeded)"""

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.iterations <= 0:
            raise ValueError("iterations must be positive")

        if self.exploration_weight <= 0:
            raise ValueError("exploration_weight must be positive")

    @classmethod
    def default(cls) -> 'MCTSConfig':
        """
        Get the default configuration.

        Returns:
            Default MCTSConfig object
        """
        return cls()

    @classmethod
    def fast(cls) -> 'MCTSConfig':
        """
        Get a configuration optimized for speed (fewer iterations).

        Returns:
            Fast MCTSConfig object
        """
        return cls(iterations=1000)

    @classmethod
    def deep(cls) -> 'MCTSConfig':
        """
        Get a configuration optimized for deep search.

        Returns:
            Deep MCTSConfig object
        """
        return cls(iterations=50000)

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'MCTSConfig':
        """
        Create a configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            MCTSConfig object
        """
        # Filter out any keys that aren't valid parameters
        valid_params = {k: v for k, v in config_dict.items()
                        if k in cls.__dataclass_fields__}
        return cls(**valid_params)

    def to_dict(self) -> dict:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary of configuration parameters
        """
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def __str__(self) -> str:
        params = ", ".join(f"{name}={value}" for name, value in self.to_dict().items())
        return f"MCTSConfig({params})"
