"""Adaptadores de I/O: HTTP (httpx) y ficheros JSON."""
