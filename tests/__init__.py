"""
Test suite for Refinery.

Provides tests for all modules:
- Unit tests for each pipeline stage
- End-to-end extraction scenarios
- Configuration and CLI tests
"""
