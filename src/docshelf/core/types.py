"""Core type definitions."""

from typing import NewType

# URL path selected by the navigation menu (e.g., "/introduction")
URLPath = NewType("URLPath", str)

# Path of a retrievable Markdown resource (e.g., "/markdown/introduction.md")
# Distinct from URLPath: a route selects a document, it is not one
DocumentId = NewType("DocumentId", str)
