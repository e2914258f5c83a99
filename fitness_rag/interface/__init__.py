"""User interface modules.

The CLI is invoked via the ``fitness-rag`` script or ``python -m fitness_rag.interface.cli``.
"""
