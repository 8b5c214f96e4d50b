"""Test helper utilities for the arcsigns test suite."""

from tests.helpers.cli_assertions import (
    assert_command_failed,
    assert_command_success,
    assert_error_message,
)

__all__ = [
    "assert_command_success",
    "assert_command_failed",
    "assert_error_message",
]
