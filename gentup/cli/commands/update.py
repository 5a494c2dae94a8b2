"""System update command: the full sync/upgrade/cleanup cycle.

Updater runs the steps below strictly in order, one subprocess at a time.
Each step returns True to let the run continue, False to end it
successfully. Fatal problems raise GentupError and end it with status 1.

     1. verify_environment           8. reconcile_config_files
     2. bootstrap_dependencies       9. depclean (kernel guarded)
     3. conditional_sync            10. reverse_dependencies
     4. priority_upgrades           11. sanity_check
     5. detect_pending_updates      12. distfile_and_kernel_cleanup
     6. fetch_sources               13. optional_trim
     7. upgrade_all

Steps 3 to 7 are skipped in cleanup-only mode.
"""

import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from .. import colors, display
from ..prompt import Answer, auto_confirm, confirm as terminal_confirm
from ...core import classify, portage, system
from ...core.classify import OrphanReport
from ...core.config import (
    Settings, read_config, read_package_list, write_package_list,
)
from ...core.errors import CommandFailed, GentupError, OperatorQuit
from ...core.guard import CleanupPlan, guard_cleanup
from ...core.runner import CommandSpec, ExecutionMode, ShellOutResult, must_succeed, run

logger = logging.getLogger(__name__)

Runner = Callable[[CommandSpec, ExecutionMode], ShellOutResult]
Confirm = Callable[[str], Answer]


@dataclass
class WorkflowState:
    """Flags for one run plus what earlier steps found."""
    force: bool = False
    cleanup_only: bool = False
    background_fetch: bool = False
    optional: bool = False
    trim_requested: bool = True
    unattended: bool = False
    # Filled in by the steps
    running_kernel: str = ''
    pending: List[str] = field(default_factory=list)
    orphans: OrphanReport = field(default_factory=OrphanReport)
    orphans_removed: bool = False
    kernel_preserved: bool = False

    @classmethod
    def from_args(cls, args) -> 'WorkflowState':
        return cls(
            force=getattr(args, 'force', False),
            cleanup_only=getattr(args, 'cleanup', False),
            background_fetch=getattr(args, 'background', False),
            optional=getattr(args, 'optional', False),
            trim_requested=not getattr(args, 'notrim', False),
            unattended=getattr(args, 'unattended', False),
        )


class Updater:
    """Sequences one update run."""

    def __init__(self, state: WorkflowState,
                 settings: Optional[Settings] = None,
                 config: Optional[dict] = None,
                 runner: Runner = run,
                 confirm: Optional[Confirm] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 kernel_probe: Callable[[], str] = system.running_kernel,
                 rotational_probe: Optional[Callable[[], bool]] = None):
        self.state = state
        self.settings = settings or Settings()
        self.config = config if config is not None else read_config(self.settings.config_file)
        self.runner = runner
        if confirm is None:
            confirm = auto_confirm if state.unattended else terminal_confirm
        self.confirm = confirm
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.kernel_probe = kernel_probe
        self.rotational_probe = rotational_probe or (
            lambda: system.is_rotational(self.settings.proc_mounts, self.settings.sys_block)
        )

    # -- plumbing ----------------------------------------------------------

    def _run(self, spec: CommandSpec, mode: ExecutionMode) -> ShellOutResult:
        """Run a command whose exit status the caller reads itself.

        A spawn failure is still fatal.
        """
        result = self.runner(spec, mode)
        if not result.ok:
            raise CommandFailed(spec, result)
        return result

    def _must(self, spec: CommandSpec, mode: ExecutionMode) -> str:
        if mode == ExecutionMode.INTERACTIVE and spec.label:
            print(colors.step(spec.label))
        return must_succeed(self.runner(spec, mode), spec)

    def _ask(self, prompt: str) -> bool:
        answer = self.confirm(prompt)
        if answer == Answer.QUIT:
            raise OperatorQuit(prompt)
        return answer == Answer.PROCEED

    def _is_installed(self, package: str) -> bool:
        return self._run(portage.package_installed(package), ExecutionMode.SILENT).returncode == 0

    def steps(self) -> list:
        return [
            self.verify_environment,
            self.bootstrap_dependencies,
            self.conditional_sync,
            self.priority_upgrades,
            self.detect_pending_updates,
            self.fetch_sources,
            self.upgrade_all,
            self.reconcile_config_files,
            self.depclean,
            self.reverse_dependencies,
            self.sanity_check,
            self.distfile_and_kernel_cleanup,
            self.optional_trim,
        ]

    def run(self) -> int:
        """Run every step.

        Returns:
            0 on success or early successful exit, 1 on any fatal error
        """
        try:
            for step in self.steps():
                logger.debug("Step %s", step.__name__)
                if not step():
                    logger.debug("Run ended after %s", step.__name__)
                    return 0
        except OperatorQuit:
            return 0
        except GentupError as e:
            print(colors.found(str(e), colors.error), file=sys.stderr)
            return 1

        print(colors.step("All done!!!"))
        return 0

    # -- steps -------------------------------------------------------------

    def verify_environment(self) -> bool:
        distro = system.check_distro(self.settings.os_release, self.settings.required_distro)
        print(colors.step(f"Running on {distro}: OK"))
        self.state.running_kernel = self.kernel_probe()
        logger.debug("Running kernel identity: %s", self.state.running_kernel)
        return True

    def bootstrap_dependencies(self) -> bool:
        print(colors.step("Checking environment"))
        for package, binary, post_install in self.settings.required_tools:
            if binary and self._binary_exists(binary):
                continue
            print(colors.found(f"This updater requires the {package} package.", colors.warning))
            self._must(portage.install_tool(package), ExecutionMode.CAPTURED)
            if post_install:
                self._must(portage.post_install(post_install), ExecutionMode.CAPTURED)

        if portage.ensure_elog_config(self.settings.make_conf):
            print(colors.found("Configured elogv in make.conf", colors.warning))

        if self.state.optional:
            return self._install_optional_packages()
        return True

    def _binary_exists(self, binary: str) -> bool:
        return Path(binary).exists()

    def _install_optional_packages(self) -> bool:
        path = self.settings.package_file
        if not path.exists():
            write_package_list(path, self.settings.optional_packages)
            print(colors.found(
                f"Created {path} with a default package list. "
                "Review it, then run again.", colors.warning))
            return False

        packages = read_package_list(path)
        total = len(packages)
        for count, package in enumerate(packages, 1):
            logger.debug("Checking optional package %d of %d: %s", count, total, package)
            if self._is_installed(package):
                continue
            print(colors.found(f"{package} is not installed. Installing...", colors.warning))
            self._must(portage.install_optional(package), ExecutionMode.INTERACTIVE)
        return True

    def conditional_sync(self) -> bool:
        if self.state.cleanup_only:
            return True

        self._must(portage.eix_update(), ExecutionMode.CAPTURED)

        recent = system.tree_too_recent(
            self.settings.tree_timestamp, now=self.clock(),
            threshold=self.settings.sync_interval,
        )
        if recent and not self.state.force:
            print(colors.found("Last sync was too recent: Skipping sync phase", colors.warning))
        else:
            self._must(portage.sync_tree(), ExecutionMode.CAPTURED)

        self._read_news()
        return True

    def _read_news(self):
        output = self._must(portage.news_count(), ExecutionMode.SILENT)
        count = classify.news_count(output)
        if count == 0:
            print(colors.found("No news is good news", colors.info))
            return
        print(colors.found(f"You have {count} news item(s) to read", colors.warning))
        self._run(portage.news_list(), ExecutionMode.INTERACTIVE)
        self._run(portage.news_read(), ExecutionMode.INTERACTIVE)

    def priority_upgrades(self) -> bool:
        if self.state.cleanup_only:
            return True
        for package in self.settings.priority_packages:
            result = self._run(portage.package_outdated(package), ExecutionMode.SILENT)
            if result.returncode != 0:
                continue
            print(colors.found(f"{package} needs to be upgraded", colors.warning))
            self._must(portage.upgrade_package(package), ExecutionMode.INTERACTIVE)
        return True

    def detect_pending_updates(self) -> bool:
        if self.state.cleanup_only:
            return True

        output = self._must(portage.world_pretend(), ExecutionMode.CAPTURED)
        self.state.pending = classify.pending_updates(output)
        total = len(self.state.pending)

        if total == 0:
            print(colors.found("There are no pending updates", colors.info))
            return self.state.force or self.state.cleanup_only

        if total == 1:
            print(colors.found("There is 1 package pending an update", colors.warning))
        else:
            print(colors.found(f"There are {total} packages pending updates", colors.warning))
        display.print_package_list(self.state.pending)
        return True

    def fetch_sources(self) -> bool:
        if self.state.cleanup_only or self.state.background_fetch:
            return True
        total = len(self.state.pending)
        if total:
            print(colors.step("Fetching sources"))
        for count, atom in enumerate(self.state.pending, 1):
            print(colors.found(f"Downloading {count} of {total}: {atom}"))
            self._must(portage.fetch_source(atom), ExecutionMode.SILENT)
        return True

    def upgrade_all(self) -> bool:
        if self.state.cleanup_only:
            return True
        if self._ask("Ready for upgrade?"):
            self._must(portage.world_upgrade(), ExecutionMode.INTERACTIVE)
            # elogv only shows messages: its exit status is not fatal
            result = self._run(portage.elog_viewer(), ExecutionMode.INTERACTIVE)
            if result.returncode != 0:
                logger.warning("elogv did not run cleanly")
        return True

    def reconcile_config_files(self) -> bool:
        self._must(portage.dispatch_conf(), ExecutionMode.INTERACTIVE)
        return True

    def depclean(self) -> bool:
        output = self._must(portage.depclean_pretend(), ExecutionMode.CAPTURED)
        report = classify.orphans(output)
        self.state.orphans = report

        plan = guard_cleanup(report, self.state.running_kernel, self.state.cleanup_only)
        logger.debug("Cleanup plan: %s", plan.value)

        if plan == CleanupPlan.NO_ACTION:
            print(colors.found("There are no orphaned dependencies", colors.info))
            return True

        if plan == CleanupPlan.EXCLUDE_KERNEL_PACKAGES:
            self.state.kernel_preserved = True
            print(colors.found(
                f"Found {report.count} dependencies to clean, including kernel packages",
                colors.warning))
            if report.involves_kernel(self.state.running_kernel):
                print(colors.found("The running kernel is among them", colors.error))
            print(colors.found(
                "Preserving running kernel: reboot into the new kernel, "
                "then run gentup --cleanup", colors.warning))
            return False

        print(colors.found(f"Found {report.count} dependencies to clean", colors.warning))
        if report.involves_kernel(self.state.running_kernel):
            print(colors.found("The running kernel is among them", colors.error))
        if self._ask("Perform dependency cleanup as per above?"):
            self._must(portage.depclean(ask=not self.state.unattended), ExecutionMode.INTERACTIVE)
            self.state.orphans_removed = True
        return True

    def reverse_dependencies(self) -> bool:
        result = self._run(portage.revdep_pretend(), ExecutionMode.CAPTURED)
        if classify.system_consistent(result.output):
            print(colors.found("No broken reverse dependencies were found", colors.info))
            return True

        print(colors.found("Broken reverse dependencies were found", colors.warning))
        if self._ask("Perform reverse dependency rebuild?"):
            self._must(portage.revdep_rebuild(), ExecutionMode.INTERACTIVE)
        return True

    def sanity_check(self) -> bool:
        self._must(portage.obsolete_check(), ExecutionMode.INTERACTIVE)
        return True

    def distfile_and_kernel_cleanup(self) -> bool:
        unconditional = (
            self.state.cleanup_only
            or self.config.get('clean_default', False)
            or self.state.orphans_removed
        )
        if unconditional or self._ask("Clean up old kernels?"):
            self._must(portage.eclean_kernel(), ExecutionMode.INTERACTIVE)
        if unconditional or self._ask("Clean up old distribution source tarballs?"):
            self._must(portage.eclean_distfiles(), ExecutionMode.INTERACTIVE)
        return True

    def optional_trim(self) -> bool:
        if not self.state.trim_requested:
            return True
        if self.rotational_probe():
            logger.debug("Root filesystem is on rotational media, no trim")
            return True
        if self.config.get('trim_default', False) or self._ask("Reclaim free blocks?"):
            self._must(portage.fstrim(), ExecutionMode.INTERACTIVE)
        return True


def cmd_update(args) -> int:
    """Handle the default command - run the update cycle."""
    state = WorkflowState.from_args(args)
    return Updater(state).run()
