"""Interfaces/abstracciones del core.

Por qué:
- Define contratos (Protocol) que implementan adapters concretos.
- Invierte dependencias: el core depende de abstracciones.
"""
