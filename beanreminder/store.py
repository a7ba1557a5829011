"""YAML reminder store: discovery, loading and saving of reminder files.

Two layouts are supported:

    reminders.yaml             # single file: version, config, reminders list

    reminders/
    ├── _config.yaml           # global config (optional)
    ├── rent.yaml              # one reminder per file, named <id>.yaml
    └── car-insurance.yaml

The scheduling engine never performs I/O; this module is how callers load
rules and write back ``last_date`` after consuming an occurrence.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import pydantic
import yaml

from . import constants
from .exceptions import ConfigurationError
from .schema import GlobalConfig, RecurrenceRule, Reminder, ReminderFile

logger = logging.getLogger(__name__)


def parse_rule(data: dict[str, Any]) -> RecurrenceRule:
    """
    Validate a raw mapping into a RecurrenceRule.

    Raises:
        ConfigurationError: If the data does not describe a valid rule
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid recurrence rule: expected a mapping, got {data!r}")
    return RecurrenceRule(**data)


def parse_reminder(data: dict[str, Any]) -> Reminder:
    """
    Validate a raw mapping into a Reminder.

    Raises:
        ConfigurationError: If the data does not describe a valid reminder
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid reminder: expected a mapping, got {data!r}")
    try:
        return Reminder(**data)
    except pydantic.ValidationError as e:
        reminder_id = data.get("id", "<unknown>")
        raise ConfigurationError(f"Invalid reminder '{reminder_id}': {e}") from e


def find_reminders_location() -> Optional[tuple[str, Path]]:
    """
    Locate reminders configuration (directory or file).

    Search order (highest to lowest priority):
    1. BEANREMINDER_DIR environment variable → directory mode
    2. BEANREMINDER_FILE environment variable → file mode
    3. reminders/ directory in current directory → directory mode
    4. reminders.yaml in current directory → file mode

    Returns:
        Tuple of ("dir", Path) or ("file", Path), or None if not found
    """
    if env_dir := os.getenv(constants.ENV_REMINDERS_DIR):
        path = Path(env_dir)
        if path.is_dir():
            return ("dir", path)
        logger.warning("%s points to non-existent directory: %s", constants.ENV_REMINDERS_DIR, env_dir)

    if env_file := os.getenv(constants.ENV_REMINDERS_FILE):
        path = Path(env_file)
        if path.is_file():
            return ("file", path)
        logger.warning("%s points to non-existent file: %s", constants.ENV_REMINDERS_FILE, env_file)

    cwd_dir = Path.cwd() / constants.DEFAULT_REMINDERS_DIR
    if cwd_dir.is_dir():
        return ("dir", cwd_dir)

    cwd_file = Path.cwd() / constants.DEFAULT_REMINDERS_FILE
    if cwd_file.is_file():
        return ("file", cwd_file)

    return None


def load_reminder_from_file(filepath: Path) -> Optional[Reminder]:
    """
    Load a single reminder from an individual YAML file.

    Args:
        filepath: Path to individual reminder YAML file

    Returns:
        Reminder object or None if file is invalid

    Note:
        Errors are logged but not raised - allows directory loading to continue
    """
    try:
        with filepath.open() as f:
            data = yaml.safe_load(f)

        if data is None:
            logger.warning("Empty reminder file: %s", filepath)
            return None

        reminder = parse_reminder(data)
        reminder.source_file = filepath

        expected_filename = f"{reminder.id}.yaml"
        if filepath.name != expected_filename:
            logger.error(
                "Failed to load reminder from '%s':\n"
                "  Reminder ID '%s' does not match filename.\n"
                "  Expected: '%s'\n"
                "  Fix: Rename file to '%s' or change 'id' field to '%s'",
                filepath,
                reminder.id,
                expected_filename,
                expected_filename,
                filepath.stem,
            )
            return None

        return reminder

    except yaml.YAMLError as e:
        logger.error("YAML parsing error in '%s': %s", filepath, e)
        return None
    except (ValueError, TypeError) as e:
        logger.error("Invalid reminder data in '%s': %s", filepath, e)
        return None


def load_reminders_from_directory(dirpath: Path) -> ReminderFile:
    """
    Load all reminders from a directory.

    Invalid files are skipped. When two files declare the same id the
    first one (in file name order) wins.

    Args:
        dirpath: Path to reminders directory

    Returns:
        ReminderFile with all loaded reminders
    """
    logger.info("Loading reminders from directory: %s", dirpath)

    config_path = dirpath / constants.CONFIG_FILENAME
    config = GlobalConfig()

    if config_path.is_file():
        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)

            if config_data is not None:
                config = GlobalConfig(**config_data)
                logger.debug("Loaded global config from: %s", config_path)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            logger.warning("Failed to load config from '%s', using defaults: %s", config_path, e)

    reminders = []
    seen_ids = {}

    for reminder_path in sorted(dirpath.glob(constants.REMINDER_FILE_PATTERN)):
        if reminder_path.name == constants.CONFIG_FILENAME:
            continue
        if reminder_path.name.startswith("."):
            continue

        reminder = load_reminder_from_file(reminder_path)
        if reminder is None:
            continue

        if reminder.id in seen_ids:
            logger.error(
                "Duplicate reminder ID '%s' found in multiple files:\n"
                "  First: %s\n"
                "  Duplicate: %s\n"
                "  The duplicate will be ignored.",
                reminder.id,
                seen_ids[reminder.id],
                reminder_path,
            )
            continue

        seen_ids[reminder.id] = reminder_path
        reminders.append(reminder)

    reminder_file = ReminderFile(reminders=reminders, config=config)

    logger.info(
        "Loaded %d reminders (%d enabled) from directory: %s",
        len(reminder_file.reminders),
        sum(1 for r in reminder_file.reminders if r.enabled),
        dirpath,
    )

    return reminder_file


def _load_single_file(filepath: Path) -> ReminderFile:
    logger.info("Loading reminders from: %s", filepath)

    try:
        with filepath.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("YAML parsing error in %s: %s", filepath, e)
        raise

    if data is None:
        logger.warning("Empty reminders file: %s", filepath)
        return ReminderFile()

    if not isinstance(data, dict):
        logger.error("Invalid reminders file %s: top level is not a mapping", filepath)
        raise ConfigurationError(f"Invalid reminders file {filepath}: expected a mapping")

    # All reminders commented out
    if data.get("reminders") is None:
        data["reminders"] = []

    try:
        reminder_file = ReminderFile(**data)
    except pydantic.ValidationError as e:
        logger.error("Invalid reminders file %s", filepath)
        raise ConfigurationError(f"Invalid reminders file {filepath}: {e}") from e

    for reminder in reminder_file.reminders:
        reminder.source_file = filepath

    logger.info(
        "Loaded %d reminders (%d enabled)",
        len(reminder_file.reminders),
        sum(1 for r in reminder_file.reminders if r.enabled),
    )

    return reminder_file


def load_reminders_file(filepath: Optional[Path] = None) -> Optional[ReminderFile]:
    """
    Load and validate reminders (supports both directory and file formats).

    Args:
        filepath: Optional explicit path to a reminders file.
                  If None, uses find_reminders_location() to auto-discover.

    Returns:
        ReminderFile object or None if nothing was found

    Raises:
        yaml.YAMLError: If YAML parsing fails (file mode only)
        ConfigurationError: If schema validation fails (file mode only)
    """
    if filepath is not None:
        return _load_single_file(filepath)

    location = find_reminders_location()
    if location is None:
        logger.info("No reminders file or directory found")
        return None

    mode, path = location
    if mode == "dir":
        return load_reminders_from_directory(path)
    return _load_single_file(path)


def load_reminders_from_path(path: Path) -> Optional[ReminderFile]:
    """
    Load reminders from an explicit file or directory path.

    Returns:
        ReminderFile, or None if the path is neither a file nor a directory
    """
    if path.is_dir():
        return load_reminders_from_directory(path)
    if path.is_file():
        return load_reminders_file(path)
    return None


def get_enabled_reminders(reminder_file: Optional[ReminderFile]) -> list[Reminder]:
    """
    Get list of enabled reminders.

    Args:
        reminder_file: ReminderFile object or None

    Returns:
        List of enabled Reminder objects
    """
    if reminder_file is None:
        return []

    return [r for r in reminder_file.reminders if r.enabled]


def _reminder_to_dict(reminder: Reminder) -> dict[str, Any]:
    return reminder.model_dump(mode="json", exclude_none=True)


def save_reminder(reminder: Reminder, filepath: Path) -> None:
    """Write one reminder to its own YAML file."""
    with filepath.open("w") as f:
        yaml.safe_dump(_reminder_to_dict(reminder), f, sort_keys=False)
    logger.debug("Saved reminder %s to %s", reminder.id, filepath)


def save_reminders_file(reminder_file: ReminderFile, filepath: Path) -> None:
    """Write a complete reminders file (version, config and reminders)."""
    data = {
        "version": reminder_file.version,
        "config": reminder_file.config.model_dump(mode="json"),
        "reminders": [_reminder_to_dict(r) for r in reminder_file.reminders],
    }
    with filepath.open("w") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    logger.info("Saved %d reminders to %s", len(reminder_file.reminders), filepath)


def save_reminders_to_path(reminder_file: ReminderFile, path: Path) -> None:
    """
    Write reminders back in the layout they were loaded from.

    A directory gets one ``<id>.yaml`` per reminder (the global config file
    is left untouched); anything else is written as a single file.
    """
    if path.is_dir():
        for reminder in reminder_file.reminders:
            save_reminder(reminder, path / f"{reminder.id}.yaml")
        logger.info("Saved %d reminders to directory: %s", len(reminder_file.reminders), path)
    else:
        save_reminders_file(reminder_file, path)
