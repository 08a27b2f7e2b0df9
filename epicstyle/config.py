"""
Configuration constants for epicstyle.

Thresholds used by the rule checks, scoring penalties, file extensions and
the console styles shared by the terminal reporter.
"""

# Rule thresholds
MAX_LINE_LENGTH = 80
MAX_FUNCTION_LINES = 25
MAX_FUNCTIONS = 3
MAX_PARAMETERS = 4

# Number of leading spaces folded into one tab by the fixer
TAB_WIDTH = 4

# Verification levels
MIN_LEVEL = 1
MAX_LEVEL = 2

# Score penalty per violation, keyed by severity value
PENALTIES = {
    'major': 5.0,
    'minor': 2.0,
}
MAX_SCORE = 100.0

C_EXTENSIONS = ('.c', '.h')

# Primitive types looked at by the declaration rules
DECLARATION_TYPES = ('int', 'char', 'float', 'double')
SPLITTABLE_TYPES = ('int', 'char', 'float', 'double', 'long', 'short', 'unsigned')

CONTROL_KEYWORDS = ('if', 'while', 'for', 'switch')

# (minimum score, rich style, message) from best to worst
SCORE_BANDS = [
    (90.0, 'bold green', 'EXCELLENT! Very clean code.'),
    (75.0, 'bold yellow', 'VERY GOOD! A few small details to fix.'),
    (50.0, 'yellow', 'FAIR! Several improvements needed.'),
    (0.0, 'bold red', 'FAILED! A lot of work needed.'),
]

SEVERITY_STYLES = {
    'major': 'red',
    'minor': 'yellow',
}

PROGRESS_BAR_WIDTH = 50
