"""Infrastructure layer — SQLite database, remote REST client, store backends, graph view.

This layer depends on stdlib, the domain layer, config models, and
third-party libs (SQLAlchemy, httpx, tenacity, NetworkX). It must never
import from services, commands, or output.
"""
