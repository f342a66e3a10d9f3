"""
Case Kernel - funeral-service case workflow engine

A small, append-only workflow kernel with:
- Closed status catalog with completion percentages
- Document-gated status transitions
- Optimistic concurrency per record
- Hash-chained, replayable status history
"""

__version__ = "0.1.0"
