"""
Reaper module.
Contains crash recovery for workers that died without deregistering.
"""

from jobqueue.reaper.main import ProcessOracle, PsutilProcessOracle, Reaper, run

__all__ = ["Reaper", "ProcessOracle", "PsutilProcessOracle", "run"]
