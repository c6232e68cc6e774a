"""Async client for the todo list API with claims challenge support."""
