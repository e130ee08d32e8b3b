from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.appx import failure_reason
from ..lib.osinfo import DESKTOP_MAJOR_VERSION, MIN_DESKTOP_BUILD, OSDetectionError, OSProfile
from ..outcomes import ErrorKind, Outcome, StepReport
from ..state_store import add_warning, set_decision

logger = logging.getLogger(__name__)

SCOPE_CURRENT_USER = "current_user"
SCOPE_PROVISIONED = "provisioned"


def select_install_scope(profile: OSProfile) -> str:
    """Desktop Windows 10/11 gets a per-user install; anything else is provisioned."""

    if profile.major_version == DESKTOP_MAJOR_VERSION and profile.is_desktop:
        return SCOPE_CURRENT_USER
    return SCOPE_PROVISIONED


def compatibility_warning(profile: OSProfile) -> str | None:
    if profile.meets_min_build:
        return None
    return (
        f"Build {profile.build_number} is older than {MIN_DESKTOP_BUILD}; "
        "the package manager may not install or run on this system."
    )


class InstallPackageManagerStep:
    step_id = "60_install_package_manager"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)
        bundle_name = ctx.manifest.winget_bundle
        bundle = str(ctx.artifact_path(bundle_name))

        try:
            profile = ctx.probe_os()
        except OSDetectionError as e:
            report.add(Outcome.failed(bundle_name, ErrorKind.PROVISIONING, f"cannot read OS profile: {e}"))
            return report

        scope = select_install_scope(profile)
        set_decision(state, "os_profile", profile.to_dict())
        set_decision(state, "install_scope", scope)

        if scope == SCOPE_CURRENT_USER:
            warning = compatibility_warning(profile)
            if warning:
                logger.warning("%s", warning)
                add_warning(state, step=self.step_id, compatibility=warning)
                ctx.block(warning)

            logger.info("Installing %s for the current user", bundle_name)
            r = ctx.installer.install_package(bundle)
            if not r.ok:
                report.add(Outcome.failed(bundle_name, ErrorKind.PACKAGE_INSTALL, failure_reason(r)))
                return report
        else:
            logger.info("Provisioning %s for all users (%s)", bundle_name, profile.caption or "unknown OS")
            license_path = str(ctx.artifact_path(ctx.manifest.winget_license))
            r = ctx.installer.install_provisioned_package(bundle, license_path)
            if not r.ok:
                report.add(Outcome.failed(bundle_name, ErrorKind.PROVISIONING, failure_reason(r)))
                return report

        report.add(Outcome.success(bundle_name, scope))
        return report
