"""
CI workflow analysis plugin.

Reads GitHub Actions workflow files with PyYAML for the workflow name,
triggers and job names; job-type flags stay keyword based. Files that do
not parse as a YAML mapping fall back to line-based patterns.
"""

import re
from typing import Any, Dict, List, Optional

import yaml

from analyzers.models import WorkflowAnalysis
from analyzers.rubric import WORKFLOW_RUBRIC, Signal

WORKFLOWS_DIR = ".github/workflows"
WORKFLOW_EXTENSIONS = (".yml", ".yaml")

NAME_PATTERN = re.compile(r"^name:[ \t]*(.+)$", re.MULTILINE)
ON_PATTERN = re.compile(r"^[\"']?on[\"']?\s*:", re.MULTILINE)
JOBS_PATTERN = re.compile(r"^jobs:[ \t]*$", re.MULTILINE)
JOB_KEY_PATTERN = re.compile(r"^ {2}([A-Za-z0-9_-]+):")

# Upstream event -> trigger label, in reporting order
TRIGGER_EVENTS = (
    ("push", "push"),
    ("pull_request", "pull_request"),
    ("schedule", "schedule"),
    ("workflow_dispatch", "manual"),
)

TEST_PATTERN = re.compile(r"test|spec|jest|mocha|cypress|playwright", re.IGNORECASE)
LINT_PATTERN = re.compile(r"lint|format|eslint|prettier", re.IGNORECASE)
BUILD_PATTERN = re.compile(r"build|compile|webpack|rollup|vite", re.IGNORECASE)
DEPLOY_PATTERN = re.compile(r"deploy|publish|release", re.IGNORECASE)
SECRETS_PATTERN = re.compile(r"secrets\.", re.IGNORECASE)
MATRIX_PATTERN = re.compile(r"strategy:\s*matrix:", re.IGNORECASE)


def is_workflow_file(name: str) -> bool:
    return name.lower().endswith(WORKFLOW_EXTENSIONS)


def _load_workflow(content: str) -> Optional[Dict[Any, Any]]:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError:
        return None
    return data if isinstance(data, dict) else None


def _event_names(on: Any) -> List[str]:
    if isinstance(on, str):
        return [on]
    if isinstance(on, list):
        return [str(event) for event in on]
    if isinstance(on, dict):
        return [str(event) for event in on]
    return []


def _labels(events: List[str]) -> List[str]:
    return [label for event, label in TRIGGER_EVENTS if event in events]


def _parsed_fields(workflow: Dict[Any, Any], file_name: str):
    """Name, triggers and job names from a parsed workflow."""
    name = workflow.get("name")
    name = str(name).strip() if name is not None else ""

    # YAML 1.1 reads a bare ``on`` key as boolean True
    on = workflow["on"] if "on" in workflow else workflow.get(True)
    triggers = _labels(_event_names(on))

    jobs = workflow.get("jobs")
    job_names = [str(job) for job in jobs] if isinstance(jobs, dict) else []
    return name or file_name, triggers, job_names


def _job_names(content: str) -> List[str]:
    """Two-space-indented keys inside the top-level ``jobs:`` block."""
    match = JOBS_PATTERN.search(content)
    if not match:
        return []

    jobs = []
    for line in content[match.end():].split("\n"):
        if line and not line[0].isspace() and not line.startswith("#"):
            break  # next top-level key
        key = JOB_KEY_PATTERN.match(line)
        if key:
            jobs.append(key.group(1))
    return jobs


def _matched_fields(content: str, file_name: str):
    """Name, triggers and job names from line patterns, for unparsable files."""
    name_match = NAME_PATTERN.search(content)
    name = name_match.group(1).strip().strip("'\"") if name_match else ""

    triggers = []
    if ON_PATTERN.search(content):
        triggers = [
            label
            for event, label in TRIGGER_EVENTS
            if re.search(rf"\b{event}\b", content)
        ]
    return name or file_name, triggers, _job_names(content)


def workflow_signals(analysis: WorkflowAnalysis) -> Dict[str, Signal]:
    return {
        "job_count": len(analysis.jobs),
        "trigger_count": len(analysis.triggers),
        "has_test_job": analysis.has_test_job,
        "has_lint_job": analysis.has_lint_job,
        "has_build_job": analysis.has_build_job,
        "has_deploy_job": analysis.has_deploy_job,
        "uses_secrets": analysis.uses_secrets,
        "matrix_strategy": analysis.matrix_strategy,
    }


def analyze_workflow(file_name: str, content: str) -> WorkflowAnalysis:
    """
    Analyze one workflow file.

    Args:
        file_name (str): Workflow file name, used when the file has no ``name:``
        content (str): Workflow YAML text

    Returns:
        WorkflowAnalysis: Extracted signals and 0-100 complexity score
    """
    workflow = _load_workflow(content)
    if workflow is not None:
        name, triggers, jobs = _parsed_fields(workflow, file_name)
    else:
        name, triggers, jobs = _matched_fields(content, file_name)

    analysis = WorkflowAnalysis(
        name=name,
        file_name=file_name,
        triggers=triggers,
        jobs=jobs,
        has_test_job=bool(TEST_PATTERN.search(content)),
        has_lint_job=bool(LINT_PATTERN.search(content)),
        has_build_job=bool(BUILD_PATTERN.search(content)),
        has_deploy_job=bool(DEPLOY_PATTERN.search(content)),
        uses_secrets=bool(SECRETS_PATTERN.search(content)),
        matrix_strategy=bool(MATRIX_PATTERN.search(content)),
    )
    analysis.complexity = WORKFLOW_RUBRIC.score(workflow_signals(analysis))
    return analysis
