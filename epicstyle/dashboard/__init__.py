"""Web dashboard (JSON API) for epicstyle."""
