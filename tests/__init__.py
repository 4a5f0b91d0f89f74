"""Test package for the Number Bonds trainer.

This package contains unit tests for the drill core and headless tests for
the pygame UI.  The UI tests use pygame's dummy video driver to avoid opening
real windows.  To run these tests, execute ``pytest`` from the project root.
"""
