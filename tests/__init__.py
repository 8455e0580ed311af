"""
Test suite for PyFastWave package.

This test suite covers:
- Import tests for all modules and submodules
- Unit tests for each solver stage, the field store and the configuration
- Integration tests for complete simulations
- Command line tools

Run with: pytest
"""
