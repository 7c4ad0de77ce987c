"""
Jobsplit Kernel - shared infrastructure for the batch splitter.

Provides:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with context propagation
- Safe, type-checked extraction from loosely-typed property bags
"""

__version__ = "0.1.0"
