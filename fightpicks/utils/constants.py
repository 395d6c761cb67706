"""
Constants used across the fight picks system.
"""

# Fight card sentinels
DEFAULT_WEIGHT_CLASS = "Catchweight"
UNKNOWN_FIGHTER_NAME = "Unknown"
MISSING_VALUE = "-"  # Method / round placeholder on fight cards
UNKNOWN_EVENT_NAME = "Unknown Event"

# Fight outcomes
RESULT_PENDING = "Pending"
RESULT_WIN = "Win"
RESULT_LOSS = "Loss"
RESULT_DRAW_OR_NO_CONTEST = "Draw/No Contest"
NON_DECISION_METHODS = ("Draw", "No Contest")

# Leagues
LEAGUE_CODE_LENGTH = 10
EVENTS_PAGE_SIZE = 50
