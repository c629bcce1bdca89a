"""
Runtime Configuration
=====================

Defaults are read from environment variables once at import time and exposed
through a module-level ``config`` instance. Callers that need a different
value pass it explicitly to the function concerned.
"""

import logging
import os

from .seed_hash import HashingAlgorithm


DEFAULT_HASH_ALGORITHM = os.getenv('MACI_HASH_ALGORITHM', 'blake512')
DEFAULT_TREE_DEGREE = int(os.getenv('MACI_TREE_DEGREE', 5))
DEFAULT_STATE_TREE_DEPTH = int(os.getenv('MACI_STATE_TREE_DEPTH', 2))
DEFAULT_LOG_LEVEL = os.getenv('MACI_LOG_LEVEL', 'WARNING')


class Config:
    """Process-wide defaults for the crypto core."""

    def __init__(self):
        self.hash_algorithm_name = DEFAULT_HASH_ALGORITHM
        self.tree_degree = DEFAULT_TREE_DEGREE
        self.state_tree_depth = DEFAULT_STATE_TREE_DEPTH
        self.log_level_name = DEFAULT_LOG_LEVEL

    @property
    def hash_algorithm(self) -> HashingAlgorithm:
        return HashingAlgorithm.from_name(self.hash_algorithm_name)

    @property
    def log_level(self) -> int:
        level = logging.getLevelName(self.log_level_name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {self.log_level_name}")
        return level


config = Config()
