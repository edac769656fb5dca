import json
import logging
from pathlib import Path
from typing import Optional, Union

from config.paths import DEFAULT_SEED_PATH
from exceptions.custom_errors import (
    FileContentError,
    FileReadingError,
    ValidationFailedError,
)
from repository.memory import InMemoryRepository
from utils.normalize import (
    application_from_record,
    module_from_record,
    operator_from_record,
    session_from_record,
    setup_from_record,
)

logger = logging.getLogger(__name__)

SEED_SECTIONS = ("setups", "modules", "operators", "sessions", "applications")


def load_seed(
    path: Union[str, Path, None] = None,
    repository: Optional[InMemoryRepository] = None,
) -> InMemoryRepository:
    """
    Fill an in-memory repository from a JSON seed document.

    Parameters:
        path: Seed file. Defaults to 'data/seed.json'.
        repository: Repository to fill. A new one is created when omitted.

    Returns:
        The filled repository.

    Raises:
        FileReadingError: If the file cannot be opened or is not valid JSON.
        FileContentError: If a section is malformed or a record is invalid.
    """
    if path is None:
        path = DEFAULT_SEED_PATH

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FileReadingError(f"Error loading seed file {path}: {e}")

    return load_seed_data(data, repository)


def load_seed_data(data, repository: Optional[InMemoryRepository] = None) -> InMemoryRepository:
    if not isinstance(data, dict):
        raise FileContentError("Seed document must be a JSON object")

    repo = repository if repository is not None else InMemoryRepository()
    builders = {
        "setups": (setup_from_record, repo.add_setup),
        "modules": (module_from_record, repo.add_module),
        "operators": (operator_from_record, repo.upsert_operator),
        "sessions": (session_from_record, repo.create_session),
        "applications": (application_from_record, repo.add_application),
    }

    for section in SEED_SECTIONS:
        records = data.get(section, [])
        if not isinstance(records, list):
            raise FileContentError(f"Seed section '{section}' must be a list")
        build, store = builders[section]
        for i, record in enumerate(records):
            try:
                store(build(record))
            except (ValidationFailedError, ValueError, TypeError, AttributeError) as e:
                raise FileContentError(f"Invalid record #{i} in '{section}': {e}")
        logger.info(f"Seeded {len(records)} {section}")

    return repo
