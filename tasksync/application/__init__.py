"""Application layer: DTOs, interfaces, use cases.

Depends only on domain and protocol definitions (DIP).
"""
