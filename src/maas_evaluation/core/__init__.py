"""Core business logic: scoring, percentiles, grades and entitlements.

This module is framework-agnostic and performs no I/O. It has no dependency
on MCP, FastMCP or the SQLite store; callers hand it validated inputs and a
weight-table snapshot and get plain results back.
"""
