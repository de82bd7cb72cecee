# src/queryforge/query/operators.py
import re

EQUAL = "="
NOT_EQUAL = "!="
GREATER = ">"
GREATER_EQUAL = ">="
LESS = "<"
LESS_EQUAL = "<="
IN = "IN"
NOT_IN = "NOT IN"
BETWEEN = "BETWEEN"
LIKE = "LIKE"
NOT_LIKE = "NOT LIKE"

# Maps short operator names used in API query params to SQL operators.
# For example, `?age[gte]=18` renders `age >= ?`.
OPERATOR_MAP = {
    'eq': EQUAL,             # Equal
    'neq': NOT_EQUAL,        # Not Equal
    'gt': GREATER,           # Greater Than
    'gte': GREATER_EQUAL,    # Greater Than or Equal
    'lt': LESS,              # Less Than
    'lte': LESS_EQUAL,       # Less Than or Equal
    'like': LIKE,            # String LIKE
    'notlike': NOT_LIKE,     # String NOT LIKE
    'in': IN,                # In a list of values
    'notin': NOT_IN,         # Not in a list of values
    'between': BETWEEN,      # Inclusive range, two values
}

# Operators that expect a list of values, typically comma-separated.
LIST_OPERATORS = {IN, NOT_IN}
RANGE_OPERATORS = {BETWEEN}
PATTERN_OPERATORS = {LIKE, NOT_LIKE}

# Anything else is rendered verbatim as `field OP ?`, so it may only contain
# comparison characters and words.
_BINARY_OPERATOR = re.compile(r"^(?:[<>=!]{1,2}|[A-Z]+(?: [A-Z]+)*)$")


def normalize_operator(operator: str | None) -> str:
    """Canonical SQL spelling of `operator`; a missing operator means equality."""
    if not operator:
        return EQUAL
    collapsed = " ".join(operator.split())
    if collapsed.lower() in OPERATOR_MAP:
        return OPERATOR_MAP[collapsed.lower()]
    return collapsed.upper()


def is_binary_operator(operator: str) -> bool:
    return bool(_BINARY_OPERATOR.match(operator))
