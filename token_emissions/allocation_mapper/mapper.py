"""Allocation mapper - infers standard groups from category labels.

Projects name their allocations freely ("Core Contributors", "Seed Round",
"Ecosystem Fund"). The mapper assigns each label to one of the standard
groups so projects can be compared side by side. Labels that match no rule
fall back to the community group.

Rules can be replaced from a YAML file:

    standard_groups:
      team:
        priority: 10
        patterns: ["^team$", "^founder"]
    label_overrides:
      "Protocol Guild": team
"""

import logging
import re
from pathlib import Path
from typing import Iterable

import yaml

from ..core.types import StandardGroup

logger = logging.getLogger(__name__)

FALLBACK_GROUP = StandardGroup.COMMUNITY
DEFAULT_PRIORITY = 5

# (group, priority, patterns); higher priority wins, earlier rules win ties
DEFAULT_RULES: list[tuple[StandardGroup, int, tuple[str, ...]]] = [
    (StandardGroup.TEAM, 10, (
        r"^(team|staff)$", r"^(co-?)?found(er|ing)", r"^employee",
        r"^(core|development).*team", r"^core.*contributor",
    )),
    (StandardGroup.ADVISORS, 10, (
        r"^advis[oe]r", r"^(strategic.*)?partner", r"^consultant",
    )),
    (StandardGroup.INVESTORS, 10, (
        r"^(pre.*)?seed", r"^private", r"^strategic.*(sale|round)", r"^series.*[a-z]",
        r"^(early.*)?investor", r"^(vc|venture|angel|backer)",
    )),
    (StandardGroup.PUBLIC_SALE, 10, (
        r"^public", r"^i[cde]o$", r"^(token|crowd|community).*sale", r"^launchpad",
    )),
    (StandardGroup.AIRDROP, 10, (
        r"^air.*drop", r"^retro", r"^user.*(distribution|allocation)",
    )),
    (StandardGroup.LIQUIDITY, 10, (
        r"^listing", r"^liquidity(?!.*mining)", r"^market.*mak", r"^(exchange|cex)",
        r"^dex.*liquidity",
    )),
    (StandardGroup.TREASURY, 10, (
        r"^(treasury|reserve|insurance)", r"^strategic.*reserve", r"^protocol.*owned",
        r"^dao.*treasury",
    )),
    (StandardGroup.COMMUNITY, 9, (
        r"^community(?!.*sale)", r"^(reward|incentive|emission|grant|bount)",
        r"^(mining|farming|yield)", r"^staking.*reward", r"^liquidity.*mining",
    )),
    (StandardGroup.ECOSYSTEM, 8, (
        r"^ecosystem", r"^development(?!.*team)", r"^(r&d|research|growth|foundation)",
        r"^protocol.*development", r"^dao(?!.*treasury)",
    )),
]


class AllocationMapper:
    """Maps allocation category labels to standard groups."""

    def __init__(self, config_path: Path | str | None = None):
        """
        Initialize allocation mapper.

        Args:
            config_path: YAML file with 'standard_groups' rules and optional
                'label_overrides'. Built-in rules are used if None.
        """
        self.label_overrides: dict[str, StandardGroup] = {}
        rules = DEFAULT_RULES

        if config_path:
            rules = self._load_config(Path(config_path)) or DEFAULT_RULES

        self._rules = self._compile(rules)

    def _load_config(
        self,
        config_path: Path,
    ) -> list[tuple[StandardGroup, int, tuple[str, ...]]] | None:
        """Read rules and overrides; None means keep the built-in rules."""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning(f"Mapping config not found: {config_path}, using defaults")
            return None
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in {config_path}: {e}")
            return None

        for label, group in (config.get("label_overrides") or {}).items():
            try:
                self.label_overrides[str(label).strip().lower()] = StandardGroup(group)
            except ValueError:
                logger.warning(f"Ignoring override '{label}': unknown group '{group}'")

        groups = config.get("standard_groups")
        if not groups:
            logger.warning(f"No 'standard_groups' in {config_path}, using defaults")
            return None

        rules = []
        for name, spec in groups.items():
            try:
                group = StandardGroup(name)
            except ValueError:
                logger.warning(f"Ignoring rules for unknown group '{name}'")
                continue
            spec = spec or {}
            rules.append((group, spec.get("priority", DEFAULT_PRIORITY), tuple(spec.get("patterns", []))))

        logger.info(f"Loaded mapping config from {config_path}")
        return rules

    @staticmethod
    def _compile(
        rules: Iterable[tuple[StandardGroup, int, tuple[str, ...]]],
    ) -> list[tuple[re.Pattern, StandardGroup, int]]:
        """Compile patterns, ordered by descending priority (stable within a priority)."""
        compiled = []
        for group, priority, patterns in rules:
            for pattern in patterns:
                try:
                    compiled.append((re.compile(pattern, re.IGNORECASE), group, priority))
                except re.error as e:
                    logger.error(f"Invalid regex pattern '{pattern}': {e}")
        compiled.sort(key=lambda rule: -rule[2])
        return compiled

    def map_label(self, label: str) -> tuple[StandardGroup, str, int]:
        """
        Map a single label to a standard group.

        Args:
            label: Allocation category label

        Returns:
            Tuple of (standard_group, matched_rule, priority)
        """
        label_clean = label.strip()

        override = self.label_overrides.get(label_clean.lower())
        if override is not None:
            return override, "label_override", 100

        for pattern, group, priority in self._rules:
            if pattern.search(label_clean):
                return group, pattern.pattern, priority

        return FALLBACK_GROUP, "no_match", 0

    def get_group_for_label(self, label: str) -> StandardGroup:
        """Just the group for a label."""
        group, _, _ = self.map_label(label)
        return group
