from __future__ import annotations

import logging
import subprocess

from photo_meta.core.models import DispatchPaths, DispatchReport

logger = logging.getLogger(__name__)


class SideEffectDispatcher:
    """Persist the batch JSON, then hand off to the user's post-processing script.

    Both steps always run, in that order, and neither raises: failures are
    logged and reported in the returned DispatchReport.
    """

    def __init__(self, paths: DispatchPaths | None = None) -> None:
        self.paths = paths or DispatchPaths()

    def write_json(self, data: bytes) -> bool:
        target = self.paths.output_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("Dispatch: failed to save JSON to %s: %s", target, exc)
            return False
        logger.info("Dispatch: JSON saved to %s", target)
        return True

    def launch_script(self) -> bool:
        """Start the script detached and return without waiting on it."""
        script = self.paths.script_path
        if not script.is_file():
            logger.error("Dispatch: script not found at %s", script)
            return False
        try:
            subprocess.Popen(
                [self.paths.shell, str(script)],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            logger.error("Dispatch: failed to execute %s: %s", script, exc)
            return False
        logger.info("Dispatch: script launched: %s", script)
        return True

    def dispatch(self, data: bytes) -> DispatchReport:
        report = DispatchReport()
        report.written = self.write_json(data)
        if not report.written:
            report.errors.append(f"could not write {self.paths.output_path}")
        report.launched = self.launch_script()
        if not report.launched:
            report.errors.append(f"could not launch {self.paths.script_path}")
        return report
