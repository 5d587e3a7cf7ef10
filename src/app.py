"""
Main Application Entry Point.

This module serves as the primary entry point for the account analysis system.
It orchestrates the analysis workflow, including:
- Account analysis initialization from settings
- Output directory management
- Snapshot export as JSON
- Cancellation on SIGINT/SIGTERM
- Error handling and logging

The application can be run directly to analyze the configured accounts.
"""

import asyncio
import os
import signal

from config import settings, logger
from analyzers.account import AccountAnalyzer
from analyzers.models import AccountSnapshot, AnalysisOptions
from miners.errors import DevyzerError


def save_snapshot(snapshot: AccountSnapshot, output_dir: str) -> str:
    """
    Write a snapshot to ``<output_dir>/<username>.json``.

    Args:
        snapshot (AccountSnapshot): Snapshot to export
        output_dir (str): Target directory, created if missing

    Returns:
        str: Path of the written file
    """
    os.makedirs(output_dir, exist_ok=True)
    file_path = os.path.join(output_dir, f"{snapshot.username}.json")
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(snapshot.model_dump_json(indent=2))
    logger.info(
        {"message": "Snapshot saved", "account": snapshot.username, "file_path": file_path}
    )
    return file_path


async def main() -> None:
    """
    Execute the main application workflow.

    Performs the following steps:
    1. Builds analysis options from settings
    2. Analyzes every configured account
    3. Saves each snapshot to the output directory

    Note:
        - Accounts are read from the GITHUB_HANDLES setting
        - A failed account is logged and does not stop the others
        - SIGINT/SIGTERM cancel the run; the current account is saved as partial
    """
    handles = settings.handles
    if not handles:
        logger.warning("No GitHub handles configured, set GITHUB_HANDLES")
        return

    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Signal handlers are unavailable on Windows and outside the main thread
            pass

    try:
        await _analyze_accounts(handles, cancel_event)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)

    logger.info("application finished")


async def _analyze_accounts(handles, cancel_event: asyncio.Event) -> None:
    options = AnalysisOptions(
        max_repos=settings.max_repos,
        include_organizations=settings.include_organizations,
        analyze_content=settings.analyze_content,
        max_content_analysis=settings.max_content_analysis,
        content_concurrency=settings.content_concurrency,
    )
    analyzer = AccountAnalyzer()

    for handle in handles:
        if cancel_event.is_set():
            break
        try:
            snapshot = await analyzer.analyze(handle, options, cancel_event)
            save_snapshot(snapshot, settings.output_dir)
        except DevyzerError as e:
            logger.error(
                {"message": "Failed to analyze account", "account": handle, "error": str(e)}
            )


if __name__ == "__main__":
    logger.info("Starting application ...")
    asyncio.run(main())
