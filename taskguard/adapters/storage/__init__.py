"""Key-value storage adapters.

Services persist JSON blobs under well-known string keys. This package keeps
that contract behind a small interface so the in-memory backend used in
development can be swapped for a file or server-side transactional store.
"""
