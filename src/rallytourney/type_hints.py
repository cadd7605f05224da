"""Type hints used in Rally Tourney."""

from typing import Callable, Dict, List, Literal, Optional, Tuple

# Match side literals (for type hints)
Side = Literal["A", "B"]

# Group tag literals
GroupTag = Literal["A", "B"]

# Scoring policy and format names
PolicyName = Literal["accumulator", "differential"]
FormatName = Literal["rounds", "bracket"]

# Stage generator modes
GroupMode = Literal["single-group", "two-group-split"]

# Group configuration option ids
ConfigId = Literal["single", "two-equal", "uneven-split"]

# Team ids per group tag (``None`` for a single group)
GroupMembers = Dict[Optional[str], List[int]]

# Callable handing out the next unused match id
MatchIdFactory = Callable[[], int]

# Group sizes of a configuration option
GroupSizes = Tuple[int, ...]

