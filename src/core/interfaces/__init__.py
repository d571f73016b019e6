"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan los adaptadores de upstream.
- Permite invertir dependencias: los controladores dependen de abstracciones
  y los tests los alimentan con fetchers en memoria.
"""
