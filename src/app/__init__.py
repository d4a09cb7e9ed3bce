"""FastAPI service exposing the indoor map."""
