"""CLI (typer + rich) que hace de host del nodo."""
