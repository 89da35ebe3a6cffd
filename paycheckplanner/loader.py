"""YAML plan file loader and validator."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from . import constants
from .schema import PlanFile, PlannerConfig, RecurrenceRule

logger = logging.getLogger(__name__)


def find_plan_location() -> Optional[tuple[str, Path]]:
    """
    Locate the plan (directory or file).

    Search order (highest to lowest priority):
    1. PAYCHECKPLANNER_DIR environment variable → directory mode
    2. PAYCHECKPLANNER_FILE environment variable → file mode
    3. plan/ directory in current directory → directory mode
    4. plan.yaml in current directory → file mode

    Returns:
        Tuple of ("dir", Path) or ("file", Path), or None if not found
    """
    if env_dir := os.getenv(constants.ENV_PLAN_DIR):
        path = Path(env_dir)
        if path.is_dir():
            return ("dir", path)
        logger.warning("PAYCHECKPLANNER_DIR points to non-existent directory: %s", env_dir)

    if env_file := os.getenv(constants.ENV_PLAN_FILE):
        path = Path(env_file)
        if path.is_file():
            return ("file", path)
        logger.warning("PAYCHECKPLANNER_FILE points to non-existent file: %s", env_file)

    cwd_dir = Path.cwd() / constants.DEFAULT_PLAN_DIR
    if cwd_dir.is_dir():
        return ("dir", cwd_dir)

    cwd_file = Path.cwd() / constants.DEFAULT_PLAN_FILE
    if cwd_file.is_file():
        return ("file", cwd_file)

    return None


def _read_yaml(filepath: Path) -> Optional[dict[str, Any]]:
    with filepath.open() as f:
        data = yaml.safe_load(f)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping at the top of {filepath}, got {type(data).__name__}")
    # Lists that are entirely commented out load as None
    for key in ("incomes", "bills"):
        if key in data and data[key] is None:
            data[key] = []
    return data


def _single_main_income(incomes: list[RecurrenceRule]) -> list[RecurrenceRule]:
    """Keep the first income flagged ``is_main`` and clear the flag on the rest."""
    result = []
    main_seen = False
    for rule in incomes:
        if rule.is_main:
            if main_seen:
                logger.warning(
                    "Income '%s' is also marked main; only the first main income is used",
                    rule.owner_id,
                )
                rule = rule.model_copy(update={"is_main": False})
            main_seen = True
        result.append(rule)
    return result


def _drop_duplicate_owners(rules: list[RecurrenceRule], source: Path) -> list[RecurrenceRule]:
    """Remove rules whose owner_id was already seen (keep first occurrence)."""
    unique = []
    seen = set()
    for rule in rules:
        if rule.owner_id in seen:
            logger.error(
                "Duplicate owner ID '%s' in %s; the duplicate will be ignored.",
                rule.owner_id,
                source,
            )
            continue
        seen.add(rule.owner_id)
        unique.append(rule)
    return unique


def load_plan_file(filepath: Path) -> PlanFile:
    """
    Load and validate a single plan YAML file.

    Args:
        filepath: Path to plan.yaml

    Returns:
        PlanFile (empty if the file is empty)

    Raises:
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If schema validation fails
    """
    logger.info("Loading plan from: %s", filepath)

    try:
        data = _read_yaml(filepath)
    except yaml.YAMLError as e:
        logger.error("YAML parsing error in %s: %s", filepath, e)
        raise

    if data is None:
        logger.warning("Empty plan file: %s", filepath)
        return PlanFile(source_file=filepath)

    plan = PlanFile(**data)
    plan.source_file = filepath
    plan.incomes = _single_main_income(plan.incomes)

    logger.info(
        "Loaded %d incomes and %d bills from %s",
        len(plan.incomes),
        len(plan.bills),
        filepath,
    )
    return plan


def load_plan_from_directory(dirpath: Path) -> PlanFile:
    """
    Load every plan file from a directory.

    Directory structure:
        plan/
        ├── _config.yaml     # Global config (optional)
        ├── paychecks.yaml   # incomes: [...]
        ├── housing.yaml     # bills: [...]
        └── ...

    Files that fail to parse or validate are logged and skipped, so one
    bad file does not hide the rest of the plan.

    Args:
        dirpath: Path to plan directory

    Returns:
        PlanFile merging all files
    """
    logger.info("Loading plan from directory: %s", dirpath)

    config = PlannerConfig()
    config_path = dirpath / constants.CONFIG_FILENAME
    if config_path.is_file():
        try:
            config_data = _read_yaml(config_path)
            if config_data is not None:
                config = PlannerConfig(**config_data)
                logger.debug("Loaded global config from: %s", config_path)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            logger.warning("Failed to load config from '%s', using defaults: %s", config_path, e)

    incomes: list[RecurrenceRule] = []
    bills: list[RecurrenceRule] = []

    for plan_path in sorted(dirpath.glob(constants.PLAN_FILE_PATTERN)):
        if plan_path.name == constants.CONFIG_FILENAME or plan_path.name.startswith("."):
            continue

        try:
            data = _read_yaml(plan_path)
            if data is None:
                logger.warning("Empty plan file: %s", plan_path)
                continue
            data.pop("config", None)
            partial = PlanFile(**data)
        except yaml.YAMLError as e:
            logger.error("YAML parsing error in '%s': %s", plan_path, e)
            continue
        except (ValueError, TypeError) as e:
            logger.error("Invalid plan data in '%s': %s", plan_path, e)
            continue

        incomes.extend(partial.incomes)
        bills.extend(partial.bills)

    plan = PlanFile(
        incomes=_single_main_income(_drop_duplicate_owners(incomes, dirpath)),
        bills=_drop_duplicate_owners(bills, dirpath),
        config=config,
        source_file=dirpath,
    )

    logger.info(
        "Loaded %d incomes and %d bills from directory: %s",
        len(plan.incomes),
        len(plan.bills),
        dirpath,
    )
    return plan


def load_plan_from_path(path: Path) -> Optional[PlanFile]:
    """
    Load a plan from either a file or a directory.

    Returns:
        PlanFile, or None if the path is neither a file nor a directory
    """
    if path.is_dir():
        return load_plan_from_directory(path)
    if path.is_file():
        return load_plan_file(path)
    return None


def load_plan() -> Optional[PlanFile]:
    """Auto-discover and load the plan, or None if there is none."""
    location = find_plan_location()
    if location is None:
        logger.info("No plan file or directory found")
        return None

    mode, path = location
    if mode == "dir":
        return load_plan_from_directory(path)
    return load_plan_file(path)
