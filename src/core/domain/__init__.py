"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras y estrictas (Pydantic v2) y la
  validación de GUIDs de suscripción.
- El dominio no conoce HTTP, CLI, ni Azure CLI: solo conceptos del problema.
"""
