"""
Test suite for the favorite-number load-test package.

This package contains:
- unit/: profiles, payloads, checks, runner, scheduler and threshold
  logic tested against mocks and in-memory Locust statistics
- integration/: the reference favorite service through Flask's test
  client, and the iteration runner over a live socket
"""
