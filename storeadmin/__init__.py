"""Store administration console: product catalog core.

Client-side catalog management for the supermarket administration console.

This package provides:
- An async gateway client for the remote product API (and a stand-alone
  in-memory gateway for offline use)
- An in-memory inventory store mirroring the remote catalog
- Filtering/search, selection and low-stock views over the snapshot
- Batch delete and batch status changes with aggregate failure reporting
- A product edit session with deferred image upload
"""

__version__ = "1.0.0"
