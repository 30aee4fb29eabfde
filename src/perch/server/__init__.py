"""ASGI adapter — translates between ASGI messages and the dispatch core."""
