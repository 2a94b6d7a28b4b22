"""Declarative test and workflow engine.

Runners are ordered sequences of steps. Every step invokes a plugin
command, registers parts of its result into a scoped context and checks
the result with declarative tests.
"""
