"""Application entry point: open the local store, seed it and report its contents."""

from __future__ import annotations

from classquiz.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from classquiz.constants.storage_constants import DEFAULT_DATA_DIR
from classquiz.core.repository import ClassroomRepository
from classquiz.core.seed import SAMPLE_ORG_ID, initialize_store
from classquiz.core.security import PasswordHasher
from classquiz.core.store import CollectionStore, FileBackend
from classquiz.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, prepare the store and log a summary of the sample organization."""
    logger = configure_logging()
    logger.info("Starting %s %s", APP_NAME, APP_VERSION)
    logger.debug(APP_ABOUT_TEXT)

    store = CollectionStore(FileBackend(DEFAULT_DATA_DIR))
    hasher = PasswordHasher()
    if initialize_store(store, hasher):
        logger.info("Created sample data in %s", DEFAULT_DATA_DIR)

    repository = ClassroomRepository(store, hasher)
    for organization in repository.get_all_organizations():
        logger.info("Organization %s [%s] is %s", organization.name, organization.code, organization.status.value)

    stats = repository.get_system_stats(SAMPLE_ORG_ID)
    logger.info(
        "Sample organization: %d teachers, %d students, %d classes, %d quizzes",
        stats.total_teachers,
        stats.total_students,
        stats.total_classes,
        stats.total_quizzes,
    )


if __name__ == "__main__":
    main()
