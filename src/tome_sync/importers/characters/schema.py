"""
Constants for the characters JSON import format and the produced actors.
"""

# Default actor document type for imported characters
ACTOR_TYPE = "npc"

# Display name used when a record has no usable name
PLACEHOLDER_NAME = "Unnamed Character"

# Provenance tag stored under flags.import.source
IMPORT_SOURCE = "characters.json"

# Movement defaults applied to every imported actor
DEFAULT_MOVEMENT_WALK = 30
DEFAULT_MOVEMENT_UNITS = "ft"

# Biography markup for a section title line
SECTION_TITLE_TEMPLATE = "<strong>{title}</strong>"
