"""Command-line front end: typer app and rich presenters."""
