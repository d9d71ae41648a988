"""
Integration tests for bgcdb.

These tests verify that parsing, category resolution, evaluation and
both store backends work together correctly.
"""
