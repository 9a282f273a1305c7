#!/usr/bin/env python3

"""
cargo-semver-checks Installer
-----------------------------
Makes `cargo semver-checks` available on PATH.

The prebuilt release binary for the runner's platform is preferred: it is
downloaded from the project's GitHub releases and copied into ~/.cargo/bin.
If there is no binary for the platform, or anything about the download fails,
the tool is built with `cargo install` instead.

Requires:
    cargo on PATH (always, since the checker runs as a cargo subcommand).
"""

import logging
import platform
import re
import shutil
import stat
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Optional
import requests
from command_runner import command_env, run_command
from retry_policy import with_retries
from semver_classifier import strip_ansi
from semver_errors import CommandError, InstallError
from semver_models import DEFAULT_CARGO_SEMVER_CHECKS_VERSION

logger = logging.getLogger(__name__)

GITHUB_RELEASES_BASE = "https://github.com/obi1kenobi/cargo-semver-checks/releases"
LATEST_TAG_RE = re.compile(r"/tag/v?(.+)$")
REQUEST_TIMEOUT = 60

_TARGET_TRIPLES = {
    ("linux", "x86_64"): "x86_64-unknown-linux-gnu",
    ("linux", "aarch64"): "aarch64-unknown-linux-gnu",
    ("darwin", "x86_64"): "x86_64-apple-darwin",
    ("darwin", "aarch64"): "aarch64-apple-darwin",
    ("windows", "x86_64"): "x86_64-pc-windows-msvc",
}
_MACHINE_ALIASES = {"amd64": "x86_64", "x64": "x86_64", "arm64": "aarch64"}

def get_target_triple(system: Optional[str] = None, machine: Optional[str] = None) -> Optional[str]:
    """Return the release asset triple for this platform, or None when no binary is published."""
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    machine = _MACHINE_ALIASES.get(machine, machine)
    return _TARGET_TRIPLES.get((system, machine))

def resolve_latest_version(session: requests.Session) -> str:
    """Read the latest release version from the redirect target of /releases/latest."""
    url = f"{GITHUB_RELEASES_BASE}/latest"

    def fetch_location() -> str:
        response = session.head(url, allow_redirects=False, timeout=REQUEST_TIMEOUT)
        if not response.is_redirect:
            response.raise_for_status()
        return response.headers.get("location", "")

    location = with_retries(fetch_location, "Resolve latest cargo-semver-checks version")
    match = LATEST_TAG_RE.search(location)
    if not match:
        raise InstallError("Failed to determine latest version")
    return match.group(1)

def _download(session: requests.Session, url: str, destination: Path) -> None:
    def fetch() -> bytes:
        response = session.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.content

    destination.write_bytes(with_retries(fetch, f"Download {url}"))

def install_from_release(version: str, session: Optional[requests.Session] = None, bin_dir: Optional[Path] = None) -> Path:
    """Download the release binary for `version` and install it into `bin_dir`."""
    triple = get_target_triple()
    if not triple:
        raise InstallError(f"Unsupported platform: {platform.system()}-{platform.machine()}")
    session = session or requests.Session()

    resolved_version = version
    if version == DEFAULT_CARGO_SEMVER_CHECKS_VERSION:
        logger.info("Resolving latest version...")
        resolved_version = resolve_latest_version(session)
        logger.info(f"Latest version: {resolved_version}")

    version_tag = resolved_version if resolved_version.startswith("v") else f"v{resolved_version}"
    is_windows = triple.endswith("windows-msvc")
    asset_name = f"cargo-semver-checks-{triple}.{'zip' if is_windows else 'tar.gz'}"
    download_url = f"{GITHUB_RELEASES_BASE}/download/{version_tag}/{asset_name}"
    binary_name = "cargo-semver-checks.exe" if is_windows else "cargo-semver-checks"

    bin_dir = bin_dir or Path.home() / ".cargo" / "bin"
    bin_dir.mkdir(parents=True, exist_ok=True)
    destination = bin_dir / binary_name

    logger.info(f"Downloading: {download_url}")
    with tempfile.TemporaryDirectory(prefix="cargo-semver-checks-") as temp_dir:
        archive_path = Path(temp_dir) / asset_name
        _download(session, download_url, archive_path)
        try:
            if is_windows:
                with zipfile.ZipFile(archive_path) as archive:
                    archive.extract(binary_name, temp_dir)
            else:
                with tarfile.open(archive_path, "r:gz") as archive:
                    archive.extract(binary_name, temp_dir)
        except (KeyError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise InstallError(f"Failed to extract {asset_name}: {e}") from e
        shutil.copyfile(Path(temp_dir) / binary_name, destination)
    destination.chmod(destination.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.info("cargo-semver-checks installed from release successfully.")
    return destination

def install_with_cargo(version: str, cwd: str, toolchain: str = "") -> None:
    """Build and install cargo-semver-checks from crates.io."""
    args = []
    if toolchain:
        args.append(f"+{toolchain}")
    args += ["install", "cargo-semver-checks", "--locked"]
    if version and version != DEFAULT_CARGO_SEMVER_CHECKS_VERSION:
        args += ["--version", version]
    logger.info(f"Installing cargo-semver-checks: cargo {' '.join(args)}")
    install = run_command(["cargo"] + args, cwd=cwd, env=command_env())
    if not install.ok:
        raise InstallError(f"cargo-semver-checks install failed: {strip_ansi(install.combined).strip()}")
    logger.info("cargo-semver-checks installed successfully.")

def install_cargo_semver_checks(version: str, cwd: str, toolchain: str = "", use_release_binary: bool = True,
                                session: Optional[requests.Session] = None) -> None:
    """Ensure cargo-semver-checks is installed, preferring the release binary."""
    try:
        cargo_check = run_command(["cargo", "--version"], cwd=cwd)
    except CommandError as e:
        raise InstallError("cargo is not available in PATH.") from e
    if not cargo_check.ok:
        raise InstallError("cargo is not available in PATH.")
    logger.info(f"Cargo version: {cargo_check.stdout.strip()}")

    if use_release_binary:
        if get_target_triple():
            try:
                install_from_release(version, session=session)
                return
            except (InstallError, requests.RequestException, OSError) as e:
                logger.warning(f"Failed to install from release: {e}. Falling back to cargo install.")
        else:
            logger.info(f"No prebuilt binary for {platform.system()}-{platform.machine()}, using cargo install.")

    install_with_cargo(version, cwd, toolchain)

