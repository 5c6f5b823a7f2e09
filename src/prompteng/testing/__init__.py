"""
Prompteng prompt test runner.
"""

from prompteng.testing.runner import (
    AssertionResult,
    ProviderConfig,
    TestCase,
    TestFile,
    TestResult,
    TestResults,
    TestRunner,
    evaluate_assertions,
    load_test_file,
    select_prompt,
)

__all__ = [
    "AssertionResult",
    "ProviderConfig",
    "TestCase",
    "TestFile",
    "TestResult",
    "TestResults",
    "TestRunner",
    "evaluate_assertions",
    "load_test_file",
    "select_prompt",
]
