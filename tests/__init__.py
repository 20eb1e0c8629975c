"""Test suite for the Gatekeeper admission core.

- unit/: Value objects, config, adapters, and each admission component
  against an in-memory Redis (fakeredis with Lua support)
- integration/: Full admission flow through AdmissionController
"""
