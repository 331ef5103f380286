"""Pipeline layer — the orchestrators.

Orchestrators receive an explicit :class:`~promptseal.pipeline.context.PipelineContext`
and never read process environment themselves.  They raise
:mod:`promptseal.errors` exceptions; translating those into
``ServiceResult`` is the service layer's job.
"""
