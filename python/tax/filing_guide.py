"""
Hometax Filing Guide Module

Step-by-step Hometax walkthroughs for VAT, withholding tax and corporate
tax returns, with the documents to prepare for each.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from common.cli import configure_logging, print_json, print_usage

logger = logging.getLogger(__name__)

GUIDES_FILENAME = "hometax_guides.yaml"
GUIDE_TYPES = ("vat", "withholding", "corporate")


@dataclass
class GuideStep:
    step: int
    action: str
    details: str

    def to_dict(self) -> dict:
        return {"step": self.step, "action": self.action, "details": self.details}


@dataclass
class FilingGuide:
    """Filing walkthrough for one tax type."""

    type: str
    title: str
    url: str
    required_documents: list[str] = field(default_factory=list)
    steps: list[GuideStep] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "title": self.title,
            "url": self.url,
            "requiredDocuments": list(self.required_documents),
            "steps": [s.to_dict() for s in self.steps],
        }


def load_guides(config_dir: Path | str | None = None) -> dict[str, FilingGuide]:
    """Load every filing guide.

    Args:
        config_dir: Directory holding hometax_guides.yaml

    Returns:
        Guides keyed by type; steps are numbered in file order
    """
    config_dir = Path(config_dir) if config_dir else Path(__file__).parent
    guides_file = config_dir / GUIDES_FILENAME

    with open(guides_file, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    guides = {}
    for guide_type in GUIDE_TYPES:
        entry = data[guide_type]
        guides[guide_type] = FilingGuide(
            type=guide_type,
            title=entry["title"],
            url=entry["url"],
            required_documents=entry.get("required_documents", []),
            steps=[
                GuideStep(step=i, action=s["action"], details=s["details"])
                for i, s in enumerate(entry.get("steps", []), start=1)
            ],
        )

    logger.info(f"Loaded {len(guides)} filing guides from {guides_file}")
    return guides


def get_guide(guide_type: str, config_dir: Path | str | None = None) -> FilingGuide | None:
    """Return the guide for a tax type, or None if the type is unknown."""
    if guide_type not in GUIDE_TYPES:
        return None
    return load_guides(config_dir)[guide_type]


USAGE = [
    "Usage: hometax-guide --type <vat|withholding|corporate>",
    "",
    "Types:",
    "  vat           부가가치세 신고 가이드",
    "  withholding   원천세 신고 가이드",
    "  corporate     법인세 신고 가이드",
]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    configure_logging()

    parser = argparse.ArgumentParser(description="Hometax filing guide")
    parser.add_argument("--type", default="", help="vat|withholding|corporate")
    args = parser.parse_args(argv)

    guide = get_guide(args.type)
    if guide is None:
        print_usage(USAGE)
        return 1

    print_json(guide.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
