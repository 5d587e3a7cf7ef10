"""
README analysis plugin.

Extracts documentation signals from a README and scores them with the
README rubric.
"""

import re
from typing import Dict, Optional

from analyzers.models import ReadmeAnalysis
from analyzers.rubric import README_RUBRIC, Signal

# Tried in order, first existing file wins
README_VARIANTS = ("README.md", "readme.md", "README.rst", "README.txt")

IMAGE_PATTERN = re.compile(r"!\[.*?\]\(.*?\)")
LINK_PATTERN = re.compile(r"\[.*?\]\(.*?\)")
BADGE_PATTERN = re.compile(
    r"!\[.*?\]\(https?://.*?(shields\.io|badge|travis|circleci|github\.com/.*/workflows)",
    re.IGNORECASE,
)
INSTALL_PATTERN = re.compile(
    r"install|npm i\b|yarn add|pip install|composer install|go get", re.IGNORECASE
)
USAGE_PATTERN = re.compile(r"usage|example|getting started|quick start", re.IGNORECASE)
CONTRIBUTING_PATTERN = re.compile(r"contributing|contribution", re.IGNORECASE)
LICENSE_PATTERN = re.compile(r"licen[sc]e|\bmit\b|\bapache\b|\bgpl\b", re.IGNORECASE)


def readme_signals(analysis: ReadmeAnalysis) -> Dict[str, Signal]:
    """Map README facts onto the README rubric's signal names."""
    return {
        "length_over_500": analysis.length > 500,
        "length_over_1500": analysis.length > 1500,
        "length_over_3000": analysis.length > 3000,
        "length_under_10000": analysis.length < 10000,
        "three_or_more_sections": len(analysis.sections) >= 3,
        "has_badges": analysis.has_badges,
        "has_install_instructions": analysis.has_install_instructions,
        "has_usage_examples": analysis.has_usage_examples,
        "has_contributing": analysis.has_contributing,
        "has_license": analysis.has_license,
        "has_images": analysis.image_count > 0,
        "two_or_more_code_blocks": analysis.code_block_count >= 2,
    }


def analyze_readme(content: Optional[str]) -> ReadmeAnalysis:
    """
    Analyze README text.

    Args:
        content (Optional[str]): README text, None when no variant exists

    Returns:
        ReadmeAnalysis: Signals and 0-100 quality score; ``exists=False`` and
            a zero score when there is no README
    """
    if not content:
        return ReadmeAnalysis()

    sections = [
        re.sub(r"^#+\s*", "", line.strip()).strip()
        for line in content.split("\n")
        if line.strip().startswith("#")
    ]
    code_block_count = content.count("```") // 2

    analysis = ReadmeAnalysis(
        exists=True,
        length=len(content),
        sections=sections,
        has_badges=bool(BADGE_PATTERN.search(content)),
        has_install_instructions=bool(INSTALL_PATTERN.search(content)),
        has_usage_examples=bool(USAGE_PATTERN.search(content)) and code_block_count > 0,
        has_contributing=bool(CONTRIBUTING_PATTERN.search(content)),
        has_license=bool(LICENSE_PATTERN.search(content)),
        image_count=len(IMAGE_PATTERN.findall(content)),
        link_count=len(LINK_PATTERN.findall(content)),
        code_block_count=code_block_count,
    )
    analysis.quality_score = README_RUBRIC.score(readme_signals(analysis))
    return analysis
