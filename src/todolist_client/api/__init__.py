"""Todo list API client."""
