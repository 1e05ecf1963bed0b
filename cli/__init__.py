"""Command line publisher for the climate updates service; the Typer app lives in ``cli.app``."""
