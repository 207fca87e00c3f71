"""
Application Layer

Services orchestrating domain objects and infrastructure adapters.

Structure:
- services/: The segment player and the manifest loader
- interfaces/: Port interfaces for infrastructure adapters
"""
