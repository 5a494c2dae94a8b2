"""Tests for host inspection helpers"""

import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from gentup.core import system
from gentup.core.errors import EnvironmentCheckError


@pytest.fixture
def os_release(tmp_path):
    def _write(first_line):
        path = tmp_path / 'os-release'
        path.write_text(f"{first_line}\nID=whatever\n")
        return path
    return _write


class TestCheckDistro:

    def test_gentoo(self, os_release):
        assert system.check_distro(os_release('NAME=Gentoo'), 'Gentoo') == 'Gentoo'

    def test_quoted_value(self, os_release):
        assert system.check_distro(os_release('NAME="Gentoo"'), 'Gentoo') == 'Gentoo'

    def test_wrong_distro(self, os_release):
        with pytest.raises(EnvironmentCheckError) as exc:
            system.check_distro(os_release('NAME="Debian GNU/Linux"'), 'Gentoo')
        assert 'Debian GNU/Linux' in str(exc.value)

    def test_missing_file(self, tmp_path):
        with pytest.raises(EnvironmentCheckError):
            system.check_distro(tmp_path / 'nope', 'Gentoo')

    def test_malformed_first_line(self, os_release):
        with pytest.raises(EnvironmentCheckError):
            system.check_distro(os_release('Gentoo'), 'Gentoo')


class TestRunningKernel:

    def test_digits_only(self, monkeypatch):
        fake = SimpleNamespace(sysname='Linux', release='6.6.58-gentoo-dist')
        monkeypatch.setattr(system.os, 'uname', lambda: fake)
        assert system.running_kernel() == '6658'


class TestTreeTooRecent:
    """The sync runs at most once every 24 hours."""

    NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def _stamp(self, tmp_path, age: timedelta):
        path = tmp_path / 'timestamp'
        path.write_text('Sun, 18 Oct 2026 12:00:00 +0000\n')
        mtime = (self.NOW - age).timestamp()
        os.utime(path, (mtime, mtime))
        return path

    def test_just_under_a_day(self, tmp_path):
        path = self._stamp(tmp_path, timedelta(hours=23, minutes=59))
        assert system.tree_too_recent(path, now=self.NOW) is True

    def test_just_over_a_day(self, tmp_path):
        path = self._stamp(tmp_path, timedelta(hours=24, minutes=1))
        assert system.tree_too_recent(path, now=self.NOW) is False

    def test_missing_timestamp(self, tmp_path):
        assert system.tree_too_recent(tmp_path / 'timestamp', now=self.NOW) is False

    def test_custom_threshold(self, tmp_path):
        path = self._stamp(tmp_path, timedelta(hours=2))
        assert system.tree_too_recent(path, now=self.NOW, threshold=timedelta(hours=1)) is False


class TestRotational:

    MOUNTS = (
        "proc /proc proc rw,nosuid 0 0\n"
        "/dev/nvme0n1p2 / ext4 rw,relatime 0 0\n"
        "/dev/nvme0n1p1 /boot vfat rw 0 0\n"
    )

    def test_root_device(self, tmp_path):
        mounts = tmp_path / 'mounts'
        mounts.write_text(self.MOUNTS)
        assert system.root_device(mounts) == '/dev/nvme0n1p2'

    def test_root_device_unreadable(self, tmp_path):
        assert system.root_device(tmp_path / 'mounts') is None

    def test_unknown_device_counts_as_rotational(self, tmp_path):
        mounts = tmp_path / 'mounts'
        mounts.write_text("/dev/gentup-missing / ext4 rw 0 0\n")
        assert system.is_rotational(mounts, tmp_path / 'block') is True

    def test_non_rotational(self, tmp_path, monkeypatch):
        mounts = tmp_path / 'mounts'
        mounts.write_text(self.MOUNTS)
        flag = tmp_path / 'block' / '259:0' / 'queue' / 'rotational'
        flag.parent.mkdir(parents=True)
        flag.write_text('0\n')

        monkeypatch.setattr(system, 'device_major', lambda device: 259)
        assert system.is_rotational(mounts, tmp_path / 'block') is False

    def test_rotational(self, tmp_path, monkeypatch):
        mounts = tmp_path / 'mounts'
        mounts.write_text("/dev/sda2 / ext4 rw 0 0\n")
        flag = tmp_path / 'block' / '8:0' / 'queue' / 'rotational'
        flag.parent.mkdir(parents=True)
        flag.write_text('1\n')

        monkeypatch.setattr(system, 'device_major', lambda device: 8)
        assert system.is_rotational(mounts, tmp_path / 'block') is True


class TestIsRoot:

    def test_root(self, monkeypatch):
        monkeypatch.setenv('USER', 'root')
        assert system.is_root() is True

    def test_not_root(self, monkeypatch):
        monkeypatch.setenv('USER', 'larry')
        assert system.is_root() is False

    def test_unset(self, monkeypatch):
        monkeypatch.delenv('USER', raising=False)
        assert system.is_root() is False
