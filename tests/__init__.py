"""Test suite for the qaflow package.

This package contains unit and integration tests validating
definition loading, context scoping, the step-execution pipeline,
runner and runtime semantics, and the command-line interface.
"""
