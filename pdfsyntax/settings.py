# Raise recoverable syntax anomalies instead of recording them as warnings.
STRICT = False

# Deepest allowed nesting of arrays, dictionaries and object definitions.
MAX_NESTING_DEPTH = 256
