"""Build pipeline: stage results, orchestration and watch mode."""

from modbuild.pipeline.orchestrator import STAGES, BuildPipeline
from modbuild.pipeline.result import BuildPolicy, BuildResult, StageResult, StageStatus
from modbuild.pipeline.watcher import BuildWatcher, build_and_watch

__all__ = [
    "STAGES",
    "BuildPipeline",
    "BuildPolicy",
    "BuildResult",
    "StageResult",
    "StageStatus",
    "BuildWatcher",
    "build_and_watch",
]
