"""
Exit codes for focuscycle.

Semantic exit codes so scripts wrapping the CLI can tell a rejected
transition apart from a configuration problem.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or configuration validation error
ERROR_INVALID_ARGS = 2

# The requested transition is not valid in the current session state
ERROR_INVALID_STATE = 3


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_INVALID_STATE: "ERROR_INVALID_STATE",
    }
    return code_names.get(code, f"UNKNOWN({code})")

