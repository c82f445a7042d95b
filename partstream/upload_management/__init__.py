"""Buffering, sequencing and concurrency control for streaming uploads."""
