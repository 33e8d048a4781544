"""Service layer — graph operations, layout, import and matching returning ServiceResult.

Services may import from domain, config and infrastructure layers.
They must never import from commands or output.
"""
