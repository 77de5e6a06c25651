"""Page rendering and the build pipeline."""

from plume.engine.build import BuildPipeline
from plume.engine.run import BuildResult, run_build

__all__ = ["BuildPipeline", "BuildResult", "run_build"]
