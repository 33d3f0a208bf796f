"""Application constants."""

from app.core.enums import ProgressionType, VariableRole

# Variable roles each progression type requires (and allows)
REQUIRED_ROLES: dict[ProgressionType, frozenset[VariableRole]] = {
    ProgressionType.SINGLE: frozenset({VariableRole.PRIMARY}),
    ProgressionType.DOUBLE: frozenset({VariableRole.PRIMARY, VariableRole.SECONDARY}),
    ProgressionType.TRIPLE: frozenset(
        {VariableRole.PRIMARY, VariableRole.SECONDARY, VariableRole.TERTIARY}
    ),
}

# current_value is matched against sequence values within this tolerance
VALUE_TOLERANCE = 1e-4

# Variable type that renders as m:ss
TIME_VARIABLE_TYPE = "time"

# Set log score scale (pain / difficulty)
MIN_SET_SCORE = 0
MAX_SET_SCORE = 10
