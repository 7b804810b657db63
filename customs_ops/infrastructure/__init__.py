"""
Capa de Infraestructura - Operaciones aduanales.

Esta capa contiene las implementaciones concretas de los puertos (interfaces).

Estructura:
- db/: Tablas, motor y repositorios SQL
- gateways/: Cliente HTTP del proveedor de screening
- in_memory/: Implementaciones in-memory para testing
- circuit_breaker.py: Circuit breakers por ambiente
"""
