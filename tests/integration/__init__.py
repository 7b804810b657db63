"""
Tests de integración contra SQLite en memoria (aiosqlite):

- repositorios SQL y TransactionManager
- motor de reintentos con persistencia real
- health checks

Para ejecutar solo esta carpeta:
    pytest tests/integration/
"""
