"""Core: dominio, contratos, configuración y el dispatcher de acciones."""
