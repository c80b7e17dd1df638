"""Tests for media concatenation and duration probing."""

import subprocess
from pathlib import Path

import pytest

from app.core.errors import ConcatenationError, FetchError, NoMediaError
from app.services.media_service import MediaService


class RecordingRun:
    def __init__(self, stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.commands: list[list[str]] = []

    def __call__(self, cmd, check=False, **kwargs):
        self.commands.append(cmd)
        if check and self.returncode != 0:
            raise subprocess.CalledProcessError(self.returncode, cmd, output="", stderr=self.stderr)
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout, stderr=self.stderr)


class TestConcatenate:
    def test_zero_inputs_fail(self, tmp_path):
        with pytest.raises(NoMediaError) as excinfo:
            MediaService().concatenate([], "audio", tmp_path)
        assert excinfo.value.kind == "audio"

    def test_single_input_is_identity(self, tmp_path, monkeypatch):
        run = RecordingRun()
        monkeypatch.setattr(subprocess, "run", run)
        source = tmp_path / "only.mp4"

        assert MediaService().concatenate([source], "video", tmp_path) is source
        assert run.commands == []
        assert list(tmp_path.iterdir()) == []

    def test_multiple_inputs_use_stream_copy(self, tmp_path, monkeypatch):
        run = RecordingRun()
        monkeypatch.setattr(subprocess, "run", run)
        paths = [tmp_path / "a.mp3", tmp_path / "b.mp3", tmp_path / "c.mp3"]

        result = MediaService().concatenate(paths, "audio", tmp_path)

        assert result == tmp_path / "concatenated_audio.mp3"
        cmd = run.commands[0]
        assert cmd[cmd.index("-f") + 1] == "concat"
        assert cmd[cmd.index("-c") + 1] == "copy"
        listing = (tmp_path / "audio_concat.txt").read_text(encoding="utf-8").splitlines()
        assert listing == [f"file '{p.resolve()}'" for p in paths]

    def test_video_output_extension(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", RecordingRun())

        result = MediaService().concatenate([tmp_path / "a.mp4", tmp_path / "b.mp4"], "video", tmp_path)

        assert result.name == "concatenated_video.mp4"

    def test_quotes_in_paths_are_escaped(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", RecordingRun())
        paths = [tmp_path / "it's.mp3", tmp_path / "b.mp3"]

        MediaService().concatenate(paths, "audio", tmp_path)

        first = (tmp_path / "audio_concat.txt").read_text(encoding="utf-8").splitlines()[0]
        assert first == "file '{}'".format(str(paths[0].resolve()).replace("'", "'\\''"))

    def test_ffmpeg_failure_names_kind(self, tmp_path, monkeypatch):
        monkeypatch.setattr(subprocess, "run", RecordingRun(returncode=1, stderr="codec mismatch"))

        with pytest.raises(ConcatenationError) as excinfo:
            MediaService().concatenate([tmp_path / "a.mp4", tmp_path / "b.mp4"], "video", tmp_path)

        assert excinfo.value.kind == "video"
        assert "codec mismatch" in str(excinfo.value)

    def test_relative_work_dir_lists_absolute_paths(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(subprocess, "run", RecordingRun())
        work_dir = Path("data/tmp/req-1")
        paths = [work_dir / "audio_1_1.mp3", work_dir / "audio_1_2.mp3"]

        MediaService().concatenate(paths, "audio", work_dir)

        listing = (tmp_path / "data/tmp/req-1/audio_concat.txt").read_text(encoding="utf-8").splitlines()
        assert listing == [f"file '{(tmp_path / p).resolve()}'" for p in paths]

    def test_missing_ffmpeg_binary(self, tmp_path, monkeypatch):
        def missing_binary(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        monkeypatch.setattr(subprocess, "run", missing_binary)

        with pytest.raises(ConcatenationError, match="could not run ffmpeg"):
            MediaService().concatenate([tmp_path / "a.mp4", tmp_path / "b.mp4"], "video", tmp_path)


class TestProbeDuration:
    def test_parses_seconds(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", RecordingRun(stdout="4.824000\n"))

        assert MediaService().probe_duration(Path("a.mp3")) == pytest.approx(4.824)

    def test_missing_duration_is_zero(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", RecordingRun(stdout="N/A\n"))

        assert MediaService().probe_duration(Path("a.mp3")) == 0.0

    def test_probe_failure_raises_fetch_error(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", RecordingRun(returncode=1, stderr="Invalid data"))

        with pytest.raises(FetchError, match="a.mp3"):
            MediaService().probe_duration(Path("a.mp3"))

    def test_missing_ffprobe_binary(self, monkeypatch):
        def missing_binary(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        monkeypatch.setattr(subprocess, "run", missing_binary)

        with pytest.raises(FetchError, match="could not run ffprobe"):
            MediaService().probe_duration(Path("a.mp3"))
