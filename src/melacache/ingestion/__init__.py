"""Ingestion layer.

Validates raw marketplace documents and folds them into an
:class:`~melacache.state.store.EntityStore`. Nothing here performs I/O;
the batch helper only awaits the fetch callables it is given.
"""

__all__: list[str] = []
