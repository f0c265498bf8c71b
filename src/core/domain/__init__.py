"""Modelos y entidades del dominio.

Por qué:
- Estructuras de datos puras y estrictas (Pydantic v2), más el tipo
  resultado y la taxonomía de errores.
- El dominio no conoce httpx, el CLI ni la red.
"""
