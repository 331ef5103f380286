"""Infrastructure layer — cipher, template files, completion backend.

This layer depends on the domain layer and third-party libs (cryptography, httpx).
It must never import from pipeline, services, commands, or output.
"""
