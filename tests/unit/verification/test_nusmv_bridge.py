"""
Unit tests for NuSMVBridge.

The NuSMV subprocess is mocked; batch and model files go to tmp_path.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pipebench.errors import CheckerError, PrerequisiteError
from pipebench.verification.checker import CHECK_BATCH, STATS_BATCH, NuSMVBridge


def _proc(output: bytes, returncode: int = 0) -> AsyncMock:
    proc = AsyncMock()
    proc.communicate = AsyncMock(return_value=(output, None))
    proc.returncode = returncode
    return proc


class TestBatchFiles:
    def test_written_with_constant_content(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        assert not bridge.prerequisites_fulfilled()
        bridge.write_batch_files()
        assert bridge.prerequisites_fulfilled()
        assert bridge.check_batch.read_text() == "go; check_property; quit;"
        assert bridge.stats_batch.read_text() == "go; print_bdd_stats; print_reachable_states; quit;"

    def test_writing_twice_is_idempotent(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        bridge.write_batch_files()
        first = (bridge.check_batch.read_text(), bridge.stats_batch.read_text())
        bridge.write_batch_files()
        second = (bridge.check_batch.read_text(), bridge.stats_batch.read_text())
        assert first == second == (CHECK_BATCH, STATS_BATCH)

    def test_unwritable_directory_raises(self, tmp_path: Path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        bridge = NuSMVBridge(work_dir=blocker)
        with pytest.raises(PrerequisiteError):
            bridge.write_batch_files()

    def test_clean_removes_files(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        bridge.write_batch_files()
        bridge.clean_batch_files()
        assert not bridge.prerequisites_fulfilled()


class TestModelFiles:
    def test_each_model_gets_its_own_file(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        a = bridge.write_model("MODULE main\n")
        b = bridge.write_model("MODULE main\n")
        assert a != b
        assert a.read_text() == "MODULE main\n"
        assert a.parent == tmp_path


class TestRun:
    @pytest.mark.asyncio
    async def test_invocation_arguments(self, tmp_path: Path):
        bridge = NuSMVBridge(binary_path="/opt/nusmv/bin/NuSMV", work_dir=tmp_path)
        model = tmp_path / "model.smv"
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"-- specification is true\n")) as spawn:
            run = await bridge.run(bridge.check_batch, model)
        args = spawn.call_args.args
        assert args == ("/opt/nusmv/bin/NuSMV", "-source", str(bridge.check_batch), str(model))
        assert run.exit_code == 0
        assert "is true" in run.output

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"syntax error", returncode=1)):
            with pytest.raises(CheckerError) as info:
                await bridge.run(bridge.check_batch, tmp_path / "m.smv")
        assert info.value.exit_code == 1
        assert info.value.output == "syntax error"

    @pytest.mark.asyncio
    async def test_empty_output_raises(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        with patch("asyncio.create_subprocess_exec", return_value=_proc(b"")):
            with pytest.raises(CheckerError):
                await bridge.run(bridge.stats_batch, tmp_path / "m.smv")

    @pytest.mark.asyncio
    async def test_missing_binary_raises(self, tmp_path: Path):
        bridge = NuSMVBridge(binary_path="/nonexistent/NuSMV_xyz_fake", work_dir=tmp_path)
        with pytest.raises(CheckerError):
            await bridge.run(bridge.check_batch, tmp_path / "m.smv")

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path, timeout_s=0.01)
        proc = AsyncMock()
        proc.communicate = AsyncMock(side_effect=[TimeoutError(), (b"", None)])
        proc.kill = MagicMock()
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            with pytest.raises(CheckerError):
                await bridge.run(bridge.check_batch, tmp_path / "m.smv")
        proc.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_non_executable_binary_raises(self, tmp_path: Path):
        binary = tmp_path / "NuSMV"
        binary.write_text("not a program\n")
        binary.chmod(0o644)
        bridge = NuSMVBridge(binary_path=str(binary), work_dir=tmp_path)
        with pytest.raises(CheckerError, match="Cannot start NuSMV"):
            await bridge.run(bridge.check_batch, tmp_path / "m.smv")

    @pytest.mark.asyncio
    async def test_start_failure_raises(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        with patch("asyncio.create_subprocess_exec", side_effect=OSError(8, "Exec format error")):
            with pytest.raises(CheckerError):
                await bridge.run(bridge.check_batch, tmp_path / "m.smv")

    @pytest.mark.asyncio
    async def test_cancellation_kills_process(self, tmp_path: Path):
        bridge = NuSMVBridge(work_dir=tmp_path)
        started = asyncio.Event()

        async def hang():
            started.set()
            await asyncio.Event().wait()

        proc = MagicMock()
        proc.communicate = hang
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            task = asyncio.create_task(bridge.run(bridge.check_batch, tmp_path / "m.smv"))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        proc.kill.assert_called_once()


class TestAvailability:
    @pytest.mark.asyncio
    async def test_missing_binary_is_unavailable(self):
        bridge = NuSMVBridge(binary_path="/nonexistent/NuSMV_xyz_fake")
        assert await bridge.check_available() is False

    @pytest.mark.asyncio
    async def test_startable_binary_is_available(self):
        bridge = NuSMVBridge(binary_path="echo")
        assert await bridge.check_available() is True

    @pytest.mark.asyncio
    async def test_help_timeout_kills_process(self):
        bridge = NuSMVBridge()
        proc = AsyncMock()
        proc.communicate = AsyncMock(side_effect=[TimeoutError(), (b"", None)])
        proc.kill = MagicMock()
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            assert await bridge.check_available() is False
        proc.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_non_executable_binary_is_unavailable(self, tmp_path: Path):
        binary = tmp_path / "NuSMV"
        binary.write_text("not a program\n")
        binary.chmod(0o644)
        bridge = NuSMVBridge(binary_path=str(binary))
        assert await bridge.check_available() is False
