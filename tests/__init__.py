"""
Test package for epicstyle.

This package contains:
- Unit tests for individual components
- Integration tests for the analyze and fix workflow
- Property-based tests using Hypothesis
"""
