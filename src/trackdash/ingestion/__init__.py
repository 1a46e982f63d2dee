"""Ingestion layer.

Adapters that turn tracking payloads, dashboard messages and fleet files
into label events, labels and demo assets.
"""

__all__: list[str] = []
