"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) para la sonda ARM, el enriquecimiento Graph y
  el proveedor de credenciales.
- Permite que los tests sustituyan los adaptadores HTTP por dobles en memoria.
"""
