"""BlockZone Lab: the NeonDrop engine and its leaderboard backend."""

__version__ = "0.1.0"
