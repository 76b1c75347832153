"""Service layer — impact analysis, render view, and the pipeline facade.

Services may import from domain, infrastructure, layout, and config.
All facade operations return ServiceResult.
"""
