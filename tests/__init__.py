"""
Tests package for the DropLink backend.

Suites are organized by type:
- unit/: Fast tests with in-memory stores and mocks
- contracts/: Behavior every blob store implementation must share
- integration/: Tests against a real Redis server
- property/: Hypothesis property-based tests
"""
