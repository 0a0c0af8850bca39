"""Unit tests for focuscycle_cli.utils.exit_codes."""

from __future__ import annotations

import pytest

from focuscycle_cli.utils.exit_codes import (
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_INVALID_STATE,
    SUCCESS,
    get_exit_code_name,
)


# ---------------------------------------------------------------------------
# Constant value tests
# ---------------------------------------------------------------------------


class TestExitCodeConstants:
    def test_values(self):
        assert (SUCCESS, ERROR_GENERAL, ERROR_INVALID_ARGS, ERROR_INVALID_STATE) == (0, 1, 2, 3)

    def test_all_distinct(self):
        codes = [SUCCESS, ERROR_GENERAL, ERROR_INVALID_ARGS, ERROR_INVALID_STATE]
        assert len(set(codes)) == len(codes)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestGetExitCodeName:
    @pytest.mark.parametrize(
        ("code", "name"),
        [
            (SUCCESS, "SUCCESS"),
            (ERROR_GENERAL, "ERROR_GENERAL"),
            (ERROR_INVALID_ARGS, "ERROR_INVALID_ARGS"),
            (ERROR_INVALID_STATE, "ERROR_INVALID_STATE"),
        ],
    )
    def test_known(self, code, name):
        assert get_exit_code_name(code) == name

    def test_unknown(self):
        assert get_exit_code_name(42) == "UNKNOWN(42)"

