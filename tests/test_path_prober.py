"""
Tests for PATH probing.
"""

import os

from bufbuild.domain.models import InstallerSettings
from bufbuild.services.path_prober import find_in_path, path_candidates

EXCLUDED = InstallerSettings(install_dir="unused").excluded_path_suffixes


def make_buf(directory, name="buf"):
    directory.mkdir(parents=True, exist_ok=True)
    binary = directory / name
    binary.write_text("")
    return binary


def env_path(*dirs):
    return os.pathsep.join(str(d) for d in dirs)


class TestFindInPath:
    """Tests for find_in_path."""

    def test_unset_path(self):
        assert find_in_path(None, excluded_suffixes=EXCLUDED) is None

    def test_first_existing_candidate_wins(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        first = make_buf(tmp_path / "usr" / "bin")
        make_buf(tmp_path / "opt" / "bin")

        found = find_in_path(
            env_path(empty, tmp_path / "usr" / "bin", tmp_path / "opt" / "bin"),
            excluded_suffixes=EXCLUDED,
            platform_name="linux",
        )

        assert found == first

    def test_project_shim_directory_is_skipped(self, tmp_path):
        shim_dir = tmp_path / "project" / "node_modules" / ".bin"
        make_buf(shim_dir)

        assert find_in_path(env_path(shim_dir), excluded_suffixes=EXCLUDED, platform_name="linux") is None

    def test_virtualenv_and_global_shims_are_skipped(self, tmp_path):
        venv_bin = tmp_path / "project" / ".venv" / "bin"
        npm_global = tmp_path / "home" / ".npm-global" / "bin"
        make_buf(venv_bin)
        make_buf(npm_global)
        real = make_buf(tmp_path / "usr" / "local" / "bin")

        found = find_in_path(
            env_path(venv_bin, npm_global, real.parent),
            excluded_suffixes=EXCLUDED,
            platform_name="linux",
        )

        assert found == real

    def test_existence_only(self, tmp_path):
        binary = make_buf(tmp_path / "bin")
        binary.chmod(0o644)

        found = find_in_path(env_path(binary.parent), excluded_suffixes=EXCLUDED, platform_name="linux")

        assert found == binary

    def test_windows_executable_name(self, tmp_path):
        make_buf(tmp_path / "bin", "buf")
        exe = make_buf(tmp_path / "bin", "buf.exe")

        assert find_in_path(env_path(tmp_path / "bin"), platform_name="win32") == exe

    def test_tilde_expands_to_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
        binary = make_buf(tmp_path / "bin")

        found = find_in_path(f"~{os.sep}bin", platform_name="linux")

        assert found == binary

    def test_nothing_found(self, tmp_path):
        assert find_in_path(env_path(tmp_path), platform_name="linux") is None


class TestPathCandidates:
    """Tests for path_candidates."""

    def test_keeps_order_and_drops_excluded(self, tmp_path):
        dirs = [tmp_path / "a", tmp_path / "node_modules" / ".bin", tmp_path / "b"]

        candidates = path_candidates(env_path(*dirs), excluded_suffixes=EXCLUDED, platform_name="linux")

        assert candidates == [tmp_path / "a" / "buf", tmp_path / "b" / "buf"]


class TestOwnShimExclusion:
    """Directories that hold bufbuild's own `buf` script are never returned."""

    def test_user_install_bin_is_skipped(self, tmp_path):
        user_bin = tmp_path / "home" / ".local" / "bin"
        make_buf(user_bin)

        assert find_in_path(env_path(user_bin), excluded_suffixes=EXCLUDED, platform_name="linux") is None

    def test_user_install_bin_via_tilde_is_skipped(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
        make_buf(tmp_path / ".local" / "bin")

        found = find_in_path(f"~{os.sep}.local{os.sep}bin", excluded_suffixes=EXCLUDED, platform_name="linux")

        assert found is None

    def test_arbitrarily_named_virtualenv_is_skipped(self, tmp_path):
        venv_bin = tmp_path / "proj" / "venv" / "bin"
        make_buf(venv_bin)
        real = make_buf(tmp_path / "usr" / "local" / "bin")

        found = find_in_path(
            env_path(venv_bin, real.parent),
            excluded_suffixes=EXCLUDED,
            platform_name="linux",
            excluded_dirs=[str(venv_bin)],
        )

        assert found == real

    def test_excluded_dir_matches_with_trailing_separator(self, tmp_path):
        env_bin = tmp_path / "proj" / "env" / "bin"
        make_buf(env_bin)

        found = find_in_path(
            str(env_bin) + os.sep,
            platform_name="linux",
            excluded_dirs=[str(env_bin)],
        )

        assert found is None

    def test_excluded_dirs_leave_other_entries_alone(self, tmp_path):
        real = make_buf(tmp_path / "usr" / "bin")

        found = find_in_path(
            env_path(real.parent),
            platform_name="linux",
            excluded_dirs=[str(tmp_path / "proj" / "venv" / "bin")],
        )

        assert found == real
