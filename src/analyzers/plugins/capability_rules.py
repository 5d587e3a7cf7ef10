"""
Tooling Capability Rules.

Versioned pattern -> capability table used to detect lint, test,
type-check and documentation tooling in a dependency manifest. A rule
matches either dependency names or script names.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Set, Tuple

CAPABILITY_RULES_VERSION = "1"


class Capability(Enum):
    """Tooling capabilities detected from a manifest."""

    LINTING = "linting"
    TESTING = "testing"
    TYPE_CHECKING = "type_checking"
    DOCUMENTATION = "documentation"


class RuleSource(Enum):
    DEPENDENCY = "dependency"
    SCRIPT = "script"


@dataclass(frozen=True)
class CapabilityRule:
    capability: Capability
    source: RuleSource
    pattern: str

    def matches(self, name: str) -> bool:
        return re.search(self.pattern, name, re.IGNORECASE) is not None


CAPABILITY_RULES: Tuple[CapabilityRule, ...] = (
    # Linting / formatting
    CapabilityRule(
        Capability.LINTING,
        RuleSource.DEPENDENCY,
        r"eslint|tslint|prettier|stylelint|jshint|^ruff$|^flake8|^pylint$|^black$|^isort$",
    ),
    CapabilityRule(Capability.LINTING, RuleSource.SCRIPT, r"lint|format"),
    # Testing
    CapabilityRule(
        Capability.TESTING,
        RuleSource.DEPENDENCY,
        r"jest|mocha|chai|jasmine|karma|^ava$|^tape$|cypress|playwright|vitest|^pytest|^tox$|^nose",
    ),
    CapabilityRule(Capability.TESTING, RuleSource.SCRIPT, r"test|spec"),
    # Type checking
    CapabilityRule(
        Capability.TYPE_CHECKING,
        RuleSource.DEPENDENCY,
        r"^typescript$|^@types/|^mypy$|^pyright$|^pytype$",
    ),
    CapabilityRule(Capability.TYPE_CHECKING, RuleSource.SCRIPT, r"typecheck|type-check|tsc|mypy"),
    # Documentation
    CapabilityRule(
        Capability.DOCUMENTATION,
        RuleSource.DEPENDENCY,
        r"typedoc|jsdoc|^sphinx|^mkdocs|^pdoc",
    ),
    CapabilityRule(
        Capability.DOCUMENTATION, RuleSource.SCRIPT, r"docs|documentation|typedoc|jsdoc"
    ),
)


def detect_capabilities(
    dependencies: Iterable[str],
    scripts: Iterable[str],
    rules: Tuple[CapabilityRule, ...] = CAPABILITY_RULES,
) -> Set[Capability]:
    """
    Match dependency and script names against the rule table.

    Args:
        dependencies (Iterable[str]): Dependency names (runtime and dev)
        scripts (Iterable[str]): Script names

    Returns:
        Set[Capability]: Capabilities with at least one matching rule
    """
    names = {
        RuleSource.DEPENDENCY: list(dependencies),
        RuleSource.SCRIPT: list(scripts),
    }
    return {
        rule.capability
        for rule in rules
        if any(rule.matches(name) for name in names[rule.source])
    }
