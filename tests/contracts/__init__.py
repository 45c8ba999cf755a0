"""
Contract tests for store interfaces.

Contract tests verify that every implementation of an interface follows
the same behavior, so services can swap one for another.
"""
