"""
Tests for Tree Maker

This package contains tests for:
- Seeded randomness and branch configuration
- Growth paths and tube meshes
- Hierarchy assembly and scene sinks
- Tree file loading, archetypes and the command line
"""
