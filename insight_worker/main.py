from insight_worker.analyzers.factory import build_analyzer_registry
from insight_worker.config.settings import Settings
from insight_worker.database.connection import close_pool, init_pool
from insight_worker.database.repositories.record_repository import RecordRepository
from insight_worker.inference.factory import InferenceClientFactory
from insight_worker.logging.logger import Log
from insight_worker.worker.job_runner import JobRunner
from insight_worker.worker.recovery import RecoveryScanner
from insight_worker.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> recover -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        store = RecordRepository()
        inference_client = InferenceClientFactory.create(settings)
        registry = build_analyzer_registry(settings, store, inference_client)
        job_runner = JobRunner(registry, store, settings)
        worker = Worker(job_runner, settings)
        RecoveryScanner(store, worker, registry, settings).run()
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
