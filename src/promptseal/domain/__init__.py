"""Domain layer — template text rules and value models.

This layer depends only on stdlib, pydantic, ruamel.yaml and promptseal.errors.
It must never import from pipeline, services, infrastructure, commands, or config.
"""
