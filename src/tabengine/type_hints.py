"""Type hints used in Tab Engine."""

from typing import Dict, List, Literal, Optional, Tuple

# Debate side string constants (for runtime use)
AFF = "aff"
NEG = "neg"

# Basically, aff or neg
Side = Literal["aff", "neg"]

PairingStatus = Literal["scheduled", "in_progress", "completed", "bye"]

# Team id pair, canonicalized by PairingHistory
TeamPair = Tuple[str, str]
# (pairing_id, slot index) addressing one judge slot
SlotKey = Tuple[str, int]
# Operator edits applied at commit time
Overrides = Dict[SlotKey, Optional[str]]
# Row/column assignment pairs returned by the Hungarian solver
Assignment = List[Tuple[int, int]]
CostMatrix = List[List[float]]

Liveness = Literal["safe", "live", "dead"]

#  LocalWords:  SlotKey
