"""
Installer downloads — file fetch and sha256 verification.
"""

from __future__ import annotations

import hashlib
import io
import urllib.error
from pathlib import Path
from unittest.mock import patch

import pytest

from cryptnox_installer.core.services.installer.errors import ChecksumMismatch
from cryptnox_installer.core.services.installer.execution.download import (
    download_file,
    expected_digest,
    fetch_text,
    sha256_file,
    verify_checksum,
)

_URLOPEN = "cryptnox_installer.core.services.installer.execution.download.urllib.request.urlopen"


def _artifact(tmp_path: Path, content: bytes = b"deb-bytes") -> Path:
    path = tmp_path / "cryptnox-cli_1.0.3-1_amd64_ubuntu-22.04.deb"
    path.write_bytes(content)
    return path


class TestVerifyChecksum:
    def test_match(self, tmp_path: Path) -> None:
        path = _artifact(tmp_path)
        digest = hashlib.sha256(b"deb-bytes").hexdigest()

        record = verify_checksum(path, digest)

        assert record.matches
        assert not record.skipped
        assert record.actual_hex == digest
        assert path.exists()

    def test_uppercase_expected(self, tmp_path: Path) -> None:
        path = _artifact(tmp_path)
        digest = hashlib.sha256(b"deb-bytes").hexdigest().upper()
        assert verify_checksum(path, digest).matches

    def test_mismatch_deletes_artifact(self, tmp_path: Path) -> None:
        path = _artifact(tmp_path)

        with pytest.raises(ChecksumMismatch) as exc:
            verify_checksum(path, "0" * 64)

        assert not path.exists()
        assert exc.value.filename == path.name
        assert exc.value.expected == "0" * 64
        assert exc.value.actual == hashlib.sha256(b"deb-bytes").hexdigest()

    @pytest.mark.parametrize("expected", [None, ""])
    def test_no_expected_skips(self, tmp_path: Path, caplog, expected) -> None:
        path = _artifact(tmp_path)

        record = verify_checksum(path, expected)

        assert record.skipped
        assert record.matches
        assert path.exists()
        assert "skipping verification" in caplog.text


class TestExpectedDigest:
    _MANIFEST = (
        "aaaa  cryptnox-cli_1.0.3-1_amd64_ubuntu-22.04.deb\n"
        "BBBB *cryptnox-cli_1.0.3-1_arm64_ubuntu-22.04.deb\n"
        "\n"
        "garbage\n"
    )

    def test_text_mode(self) -> None:
        assert expected_digest(self._MANIFEST, "cryptnox-cli_1.0.3-1_amd64_ubuntu-22.04.deb") == "aaaa"

    def test_binary_mode(self) -> None:
        assert expected_digest(self._MANIFEST, "cryptnox-cli_1.0.3-1_arm64_ubuntu-22.04.deb") == "bbbb"

    def test_absent(self) -> None:
        assert expected_digest(self._MANIFEST, "other.deb") is None


class TestSha256File:
    def test_large_file(self, tmp_path: Path) -> None:
        data = b"x" * 100_000
        path = tmp_path / "big"
        path.write_bytes(data)
        assert sha256_file(path) == hashlib.sha256(data).hexdigest()


class TestDownloadFile:
    @patch(_URLOPEN)
    def test_success(self, mock_open, tmp_path: Path) -> None:
        mock_open.return_value.__enter__.return_value = io.BytesIO(b"payload")
        dest = tmp_path / "out.deb"

        result = download_file("https://example.invalid/out.deb", dest)

        assert result["ok"] is True
        assert result["size_bytes"] == 7
        assert dest.read_bytes() == b"payload"

    @patch(_URLOPEN, side_effect=urllib.error.HTTPError(
        "https://example.invalid/out.deb", 404, "Not Found", {}, None,
    ))
    def test_http_error(self, _open, tmp_path: Path) -> None:
        dest = tmp_path / "out.deb"

        result = download_file("https://example.invalid/out.deb", dest)

        assert result["ok"] is False
        assert result["kind"] == "download_failed"
        assert "404" in result["error"]
        assert not dest.exists()

    @patch(_URLOPEN, side_effect=urllib.error.URLError("no route"))
    def test_fetch_text_unreachable(self, _open) -> None:
        assert fetch_text("https://example.invalid/SHA256SUMS") is None
