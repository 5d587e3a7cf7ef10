"""
Code structure analysis plugin.

Scores the root layout of a repository from its directory listing.
"""

import os
import re
from typing import Dict, List

from analyzers.models import CodeStructureAnalysis
from analyzers.rubric import STRUCTURE_RUBRIC, Signal
from miners.models import ContentEntry

TEST_DIR_PATTERN = re.compile(r"^(__tests__|tests?|specs?|testing|e2e)$", re.IGNORECASE)
DOCS_DIR_PATTERN = re.compile(r"^(docs?|documentation|wiki)$", re.IGNORECASE)
EXAMPLES_DIR_PATTERN = re.compile(r"^(examples?|demos?|samples?)$", re.IGNORECASE)
CONFIG_EXT_PATTERN = re.compile(r"\.(json|yml|yaml|toml|ini|conf|config|cfg)$", re.IGNORECASE)
CONFIG_NAME_PATTERN = re.compile(r"^(\..*rc|\..*ignore|.*\.config\.|dockerfile)", re.IGNORECASE)


def structure_signals(analysis: CodeStructureAnalysis) -> Dict[str, Signal]:
    extension_count = len(analysis.language_files)
    return {
        "has_tests": analysis.has_tests,
        "has_documentation": analysis.has_documentation,
        "has_examples": analysis.has_examples,
        "three_or_more_directories": analysis.directory_count >= 3,
        "has_config_files": analysis.has_config_files,
        "balanced_root_file_count": 5 < analysis.file_count < 100,
        "two_or_more_extensions": extension_count >= 2,
        "moderate_extension_diversity": 4 <= extension_count <= 8,
    }


def analyze_structure(entries: List[ContentEntry]) -> CodeStructureAnalysis:
    """
    Analyze a repository's root directory listing.

    Args:
        entries (List[ContentEntry]): Root entries; empty when unavailable

    Returns:
        CodeStructureAnalysis: Counts, layout flags and 0-100 organization score
    """
    analysis = CodeStructureAnalysis()
    language_files: Dict[str, int] = {}

    for entry in entries:
        if entry.type == "file":
            analysis.file_count += 1
            ext = os.path.splitext(entry.name)[1].lower()
            if ext:
                language_files[ext] = language_files.get(ext, 0) + 1
            if CONFIG_EXT_PATTERN.search(entry.name) or CONFIG_NAME_PATTERN.match(entry.name):
                analysis.has_config_files = True
        elif entry.type == "dir":
            analysis.directory_count += 1
            if TEST_DIR_PATTERN.match(entry.name):
                analysis.has_tests = True
            if DOCS_DIR_PATTERN.match(entry.name):
                analysis.has_documentation = True
            if EXAMPLES_DIR_PATTERN.match(entry.name):
                analysis.has_examples = True

    analysis.language_files = language_files
    analysis.organization_score = STRUCTURE_RUBRIC.score(structure_signals(analysis))
    return analysis
