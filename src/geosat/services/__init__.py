from geosat.services.imagery_job import run_imagery_job
from geosat.services.pipeline import ImageryPipeline, PipelineState

__all__ = ['ImageryPipeline', 'PipelineState', 'run_imagery_job']
