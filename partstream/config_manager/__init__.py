"""Configuration for partstream uploads."""
