"""Tests - Test suite for the primitives and coleman packages."""
