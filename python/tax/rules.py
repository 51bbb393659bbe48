"""
Tax Rules Module

Loads the YAML rule file shared by the tax calculators.
"""

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

RULES_FILENAME = "tax_rules.yaml"


def load_rules(config_dir: Path | str | None, section: str, defaults: dict) -> dict:
    """Load one section of the tax rules.

    Args:
        config_dir: Directory holding tax_rules.yaml (defaults to this package)
        section: Top-level key to read
        defaults: Rules used when the file or section is missing

    Returns:
        Rules dictionary for the section
    """
    config_dir = Path(config_dir) if config_dir else Path(__file__).parent
    rules_file = config_dir / RULES_FILENAME

    if not rules_file.exists():
        logger.warning(f"Tax rules file not found: {rules_file}, using defaults")
        return defaults

    with open(rules_file, encoding="utf-8") as f:
        rules = yaml.safe_load(f) or {}

    if section not in rules:
        logger.warning(f"No '{section}' section in {rules_file}, using defaults")
        return defaults

    logger.info(f"Loaded {section} rules from {rules_file}")
    return rules[section]
