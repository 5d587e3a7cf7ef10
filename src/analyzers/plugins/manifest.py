"""
Dependency manifest analysis plugin.

Parsers are kept in a registry; adding an ecosystem means adding a parser
class and appending an instance to ``MANIFEST_PARSERS``. A repository is
analyzed against the first manifest found, in registry order.
"""

import json
import re
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

from analyzers.models import PackageAnalysis
from analyzers.plugins.capability_rules import Capability, detect_capabilities
from config import logger


@dataclass
class ManifestData:
    """Normalized content of one manifest."""

    scripts: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    dev_dependencies: List[str] = field(default_factory=list)
    tools: List[str] = field(default_factory=list)
    license: bool = False


class ManifestParser(Protocol):
    """Protocol for manifest file parsers."""

    file_name: str

    def parse(self, content: str) -> ManifestData:
        """Parse manifest text; raise ValueError on invalid content."""
        ...


def _mapping(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} is not a mapping")
    return value


def _requirement_name(requirement: str) -> str:
    return re.split(r"[\s>=<!~\[;@(]", requirement.strip(), maxsplit=1)[0]


class PackageJsonParser:
    """Parses npm ``package.json`` files."""

    file_name = "package.json"

    def parse(self, content: str) -> ManifestData:
        pkg = json.loads(content)
        if not isinstance(pkg, dict):
            raise ValueError("package.json root is not an object")
        return ManifestData(
            scripts=list(_mapping(pkg.get("scripts"), "scripts")),
            dependencies=list(_mapping(pkg.get("dependencies"), "dependencies")),
            dev_dependencies=list(
                _mapping(pkg.get("devDependencies"), "devDependencies")
            ),
            license=bool(pkg.get("license")),
        )


class PyprojectTomlParser:
    """Parses PEP 621 and Poetry ``pyproject.toml`` files."""

    file_name = "pyproject.toml"

    def parse(self, content: str) -> ManifestData:
        data = tomllib.loads(content)
        project = _mapping(data.get("project"), "project")
        tool = _mapping(data.get("tool"), "tool")
        poetry = _mapping(tool.get("poetry"), "tool.poetry")

        dependencies = [_requirement_name(req) for req in project.get("dependencies") or []]
        dependencies += [name for name in _mapping(poetry.get("dependencies"), "deps") if name != "python"]

        dev_dependencies = [
            _requirement_name(req)
            for group in _mapping(project.get("optional-dependencies"), "extras").values()
            for req in group
        ]
        dev_dependencies += list(_mapping(poetry.get("dev-dependencies"), "dev-deps"))
        for group in _mapping(poetry.get("group"), "groups").values():
            dev_dependencies += list(_mapping(group.get("dependencies"), "group deps"))

        scripts = list(_mapping(project.get("scripts"), "scripts"))
        scripts += list(_mapping(poetry.get("scripts"), "poetry scripts"))

        return ManifestData(
            scripts=scripts,
            dependencies=[name for name in dependencies if name],
            dev_dependencies=[name for name in dev_dependencies if name],
            tools=[name for name in tool if name != "poetry"],
            license=bool(project.get("license") or poetry.get("license")),
        )


MANIFEST_PARSERS: List[ManifestParser] = [
    PackageJsonParser(),
    PyprojectTomlParser(),
]


def analyze_manifest(parser: ManifestParser, content: str) -> PackageAnalysis:
    """
    Analyze one manifest file.

    An unparsable manifest is reported as present but zero-valued.

    Args:
        parser (ManifestParser): Parser matching the manifest file
        content (str): Manifest text

    Returns:
        PackageAnalysis: Counts and tooling capability flags
    """
    try:
        data = parser.parse(content)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(
            {
                "message": "Failed to parse manifest",
                "manifest": parser.file_name,
                "error": str(e),
            }
        )
        return PackageAnalysis(manifest=parser.file_name)

    capabilities = detect_capabilities(
        data.dependencies + data.dev_dependencies + data.tools, data.scripts
    )
    return PackageAnalysis(
        manifest=parser.file_name,
        has_scripts=len(data.scripts) > 0,
        script_count=len(data.scripts),
        dependency_count=len(data.dependencies),
        dev_dependency_count=len(data.dev_dependencies),
        has_linting=Capability.LINTING in capabilities,
        has_testing=Capability.TESTING in capabilities,
        has_type_checking=Capability.TYPE_CHECKING in capabilities,
        has_documentation=Capability.DOCUMENTATION in capabilities,
        has_valid_license=data.license,
    )
