"""Book list editor: client-side state for a remote books collection."""
