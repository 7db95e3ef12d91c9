"""Feature modules: keyword research, content and topical research."""
