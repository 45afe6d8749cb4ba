"""Modelos, tipos de cable y errores del dominio.

Por qué:
- Aquí viven las estructuras de datos puras y estrictas (Pydantic v2).
- El dominio no conoce httpx, CLI, ni ficheros: solo conceptos del panel.
"""
