"""Dice rules applied by the configuration service."""

DEFAULT_SIDES = 6
MIN_SIDES = 2
MAX_SIDES = 1000
PREDEFINED_SIDES = (4, 6, 8, 10, 12, 20)

SELECTION_PREDEFINED = "predefined"
SELECTION_CUSTOM = "custom"
SELECTION_METHODS = (SELECTION_PREDEFINED, SELECTION_CUSTOM)

# Validation error priorities
PRIORITY_FORMAT = 1
PRIORITY_RANGE = 2
